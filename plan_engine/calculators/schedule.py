"""
Installment Schedule Generator

Turns plan inputs into an ordered list of draft installments whose amounts
reconcile exactly to the commissionable value.
"""

import logging
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from dateutil.relativedelta import relativedelta

from ..errors import ArithmeticInvariantViolation
from ..models import (
    GenerationSummary,
    Installment,
    InstallmentStatus,
    PaymentFrequency,
    PlanInputs,
    ScheduleResult,
    new_id,
)
from .commission import CENT, CommissionCalculator, quantize_money

logger = logging.getLogger(__name__)


def to_cents(value: Decimal) -> int:
    return int((value * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def split_amount(remaining: Decimal, count: int) -> list[Decimal]:
    """
    Split an amount into `count` parts on integer cents.

    Every part but the last is floored to the cent; the last takes the
    residual so the parts always sum to the rounded amount.
    """
    cents = to_cents(remaining)
    base = cents // count
    parts = [base] * (count - 1)
    parts.append(cents - base * (count - 1))
    return [from_cents(p) for p in parts]


def student_due_date(college_due_date: date | None, lead_time_days: int) -> date | None:
    """Students pay `lead_time_days` calendar days before the college is due."""
    if college_due_date is None:
        return None
    return college_due_date - timedelta(days=lead_time_days)


class ScheduleGenerator:
    """Generates the installment schedule for a new payment plan."""

    FREQUENCY_MONTHS = {
        PaymentFrequency.MONTHLY: 1,
        PaymentFrequency.QUARTERLY: 3,
    }
    RECONCILIATION_TOLERANCE = Decimal("0.01")

    def __init__(self, commission_calculator: CommissionCalculator | None = None):
        self.commission_calculator = commission_calculator or CommissionCalculator()

    def generate(self, inputs: PlanInputs, payment_plan_id: str | None = None) -> ScheduleResult:
        """
        Build installments for validated inputs.

        Installment 0 is the initial payment (only when its amount is > 0);
        installments 1..N split the remainder.
        """
        commissionable = self.commission_calculator.commissionable_value(inputs)
        expected = self.commission_calculator.expected_commission(inputs)
        initial_amount = quantize_money(inputs.initial_payment_amount)

        installments = []
        if initial_amount > 0:
            installments.append(self._initial_installment(inputs, initial_amount, payment_plan_id))

        remaining = commissionable - initial_amount
        amounts = split_amount(remaining, inputs.number_of_installments)
        college_dates = self.college_due_dates(inputs)

        for number, (amount, college_date) in enumerate(zip(amounts, college_dates), start=1):
            installments.append(
                Installment(
                    id=new_id(),
                    payment_plan_id=payment_plan_id,
                    installment_number=number,
                    amount=amount,
                    student_due_date=student_due_date(college_date, inputs.student_lead_time_days),
                    college_due_date=college_date,
                    is_initial_payment=False,
                    generates_commission=True,
                    status=InstallmentStatus.DRAFT,
                )
            )

        self._check_reconciliation(installments, commissionable)

        logger.info(
            f"Generated {len(installments)} installments "
            f"(commissionable {quantize_money(commissionable)}, expected commission {expected})"
        )

        return ScheduleResult(
            installments=installments,
            summary=GenerationSummary(
                total_course_value=quantize_money(inputs.total_course_value),
                commissionable_value=quantize_money(commissionable),
                expected_commission=expected,
                initial_payment=initial_amount,
                total_installments=len(installments),
                amount_per_installment=amounts[0],
            ),
        )

    def _initial_installment(
        self, inputs: PlanInputs, amount: Decimal, payment_plan_id: str | None
    ) -> Installment:
        """Upfront payment; no lead time, so both due dates match."""
        paid = inputs.initial_payment_paid
        return Installment(
            id=new_id(),
            payment_plan_id=payment_plan_id,
            installment_number=0,
            amount=amount,
            student_due_date=inputs.initial_payment_due_date,
            college_due_date=inputs.initial_payment_due_date,
            is_initial_payment=True,
            generates_commission=True,
            status=InstallmentStatus.PAID if paid else InstallmentStatus.DRAFT,
            paid_amount=amount if paid else None,
            paid_date=inputs.initial_payment_due_date if paid else None,
        )

    def college_due_dates(self, inputs: PlanInputs) -> list[date | None]:
        """
        College due dates for installments 1..N.

        Monthly and quarterly dates are offsets from the first due date
        (not chained), so a 31st stays on month-end. Custom schedules use
        the supplied dates, or None placeholders when none were supplied.
        """
        count = inputs.number_of_installments
        if inputs.payment_frequency == PaymentFrequency.CUSTOM:
            if inputs.custom_college_due_dates:
                return list(inputs.custom_college_due_dates)
            return [None] * count

        months = self.FREQUENCY_MONTHS[inputs.payment_frequency]
        first = inputs.first_college_due_date
        return [first + relativedelta(months=months * i) for i in range(count)]

    def _check_reconciliation(self, installments: list[Installment], commissionable: Decimal) -> None:
        total = sum((i.amount for i in installments), Decimal("0"))
        if abs(total - commissionable) > self.RECONCILIATION_TOLERANCE:
            raise ArithmeticInvariantViolation(
                f"Installments sum to {total}, expected {commissionable}"
            )
