"""
Payment Recorder

Applies a recorded payment to one installment and recomputes the plan
aggregates that depend on it.
"""

from datetime import datetime
from decimal import Decimal

from ..errors import ConflictError, NotFoundError
from ..models import (
    Installment,
    InstallmentStatus,
    PaymentEvent,
    PaymentPlan,
    PaymentRequest,
    PaymentResult,
    PlanAggregates,
    PlanStatus,
)
from .commission import CommissionCalculator, total_paid_across_plan


class PaymentRecorder:
    """Records payments and keeps plan aggregates consistent."""

    PAYABLE_STATUSES = (
        InstallmentStatus.DRAFT,
        InstallmentStatus.PENDING,
        InstallmentStatus.OVERDUE,
        InstallmentStatus.PARTIAL,
        InstallmentStatus.PAID,
    )

    def __init__(self, commission_calculator: CommissionCalculator | None = None):
        self.commission_calculator = commission_calculator or CommissionCalculator()

    @staticmethod
    def derive_status(paid_amount: Decimal, amount: Decimal) -> InstallmentStatus:
        """paid once the full amount is covered, partial below that."""
        if paid_amount >= amount:
            return InstallmentStatus.PAID
        return InstallmentStatus.PARTIAL

    def record(
        self,
        plan: PaymentPlan,
        request: PaymentRequest,
        recorded_at: datetime | None = None,
    ) -> PaymentResult:
        """
        Apply a payment to an installment of `plan`, mutating both.

        A new payment replaces the installment's paid_amount/paid_date
        snapshot; every payment is also appended to payment_history.
        Plan status only ever moves to completed here, never back.
        """
        installment = plan.find_installment(request.installment_id)
        if installment is None:
            raise NotFoundError(f"Installment {request.installment_id} not in plan {plan.id}")

        if installment.status not in self.PAYABLE_STATUSES:
            raise ConflictError(
                f"Cannot record payment on {installment.status.value} installment {installment.id}"
            )

        previous_status = installment.status
        previous_paid_amount = installment.paid_amount
        previous_paid_date = installment.paid_date

        self._apply(installment, request, recorded_at)
        aggregates = self.recalculate(plan)

        return PaymentResult(
            installment=installment,
            plan=aggregates,
            previous_status=previous_status,
            previous_paid_amount=previous_paid_amount,
            previous_paid_date=previous_paid_date,
        )

    def _apply(self, installment: Installment, request: PaymentRequest, recorded_at: datetime | None) -> None:
        installment.payment_history.append(
            PaymentEvent(
                paid_date=request.paid_date,
                paid_amount=request.paid_amount,
                notes=request.notes,
                recorded_at=recorded_at,
            )
        )
        latest = installment.payment_history[-1]
        installment.paid_date = latest.paid_date
        installment.paid_amount = latest.paid_amount
        installment.payment_notes = latest.notes
        installment.status = self.derive_status(latest.paid_amount, installment.amount)
        installment.is_due_soon = False

    def recalculate(self, plan: PaymentPlan) -> PlanAggregates:
        """Recompute earned commission and completion for `plan`."""
        plan.earned_commission = self.commission_calculator.earned_commission(plan)

        all_paid = bool(plan.installments) and all(
            i.status == InstallmentStatus.PAID for i in plan.installments
        )
        if all_paid:
            plan.status = PlanStatus.COMPLETED

        return PlanAggregates(
            plan_id=plan.id,
            total_paid=total_paid_across_plan(plan.installments),
            earned_commission=plan.earned_commission,
            status=plan.status,
            plan_completed=all_paid,
        )
