"""
Commission Calculator

Commissionable value, expected commission (with GST handling) and earned
commission. The module-level functions are pure; callers round with
quantize_money at the point of storage or display.
"""

from decimal import ROUND_HALF_UP, Decimal

from ..models import Installment, PaymentPlan, PlanInputs

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")

# Fixed 10% GST backed out of GST-exclusive values
GST_DIVISOR = Decimal("1.10")


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_commissionable_value(
    total: Decimal,
    materials: Decimal = ZERO,
    admin: Decimal = ZERO,
    other: Decimal = ZERO,
) -> Decimal:
    """Total minus non-commissionable fees, clamped at zero."""
    value = total - (materials or ZERO) - (admin or ZERO) - (other or ZERO)
    return max(ZERO, value)


def calculate_expected_commission(
    commissionable_value: Decimal,
    rate_percent: Decimal,
    gst_inclusive: bool = True,
) -> Decimal:
    """
    Commission on the commissionable value, unrounded.

    GST-exclusive values have GST backed out (divide by 1.10) before the
    rate is applied. Negative inputs yield zero.
    """
    if commissionable_value is None or commissionable_value <= 0:
        return ZERO
    if rate_percent is None or rate_percent <= 0:
        return ZERO

    base = commissionable_value if gst_inclusive else commissionable_value / GST_DIVISOR
    return base * (rate_percent / HUNDRED)


def calculate_earned_commission(
    total_paid: Decimal,
    plan_total_amount: Decimal,
    expected_commission: Decimal,
) -> Decimal:
    """
    Commission earned so far, rounded to cents.

    Proportional to the share of the plan's total_amount collected
    (not the commissionable value).
    """
    if not plan_total_amount or plan_total_amount <= 0:
        return ZERO.quantize(CENT)
    return quantize_money((total_paid / plan_total_amount) * expected_commission)


def total_paid_across_plan(installments: list[Installment]) -> Decimal:
    """Sum of paid_amount over paid and partial installments only."""
    return sum(
        (i.paid_amount for i in installments if i.counts_as_paid and i.paid_amount is not None),
        ZERO,
    )


class CommissionCalculator:
    """Plan-level commission figures."""

    GST_DIVISOR = GST_DIVISOR

    def commissionable_value(self, inputs: PlanInputs) -> Decimal:
        return calculate_commissionable_value(
            inputs.total_course_value,
            inputs.materials_cost,
            inputs.admin_fees,
            inputs.other_fees,
        )

    def expected_commission(self, inputs: PlanInputs) -> Decimal:
        """Expected commission for wizard input, rounded for storage."""
        return quantize_money(
            calculate_expected_commission(
                self.commissionable_value(inputs),
                inputs.commission_rate_percent,
                inputs.gst_inclusive,
            )
        )

    def earned_commission(self, plan: PaymentPlan) -> Decimal:
        """Recompute earned commission from the plan's current installments."""
        return calculate_earned_commission(
            total_paid_across_plan(plan.installments),
            plan.total_amount,
            plan.expected_commission,
        )
