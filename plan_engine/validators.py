"""
Input Validation for the Payment Plan Engine

Validates schedule inputs and payment requests before any calculation runs.
Raises ValidationError (a ValueError) with field-level details.
"""

from datetime import date
from decimal import Decimal

from .calculators.commission import calculate_commissionable_value
from .errors import ValidationError
from .models import Installment, PaymentFrequency, PaymentRequest, PlanInputs


class InputValidator:
    """Validates plan inputs and payments according to business rules."""

    MIN_INSTALLMENTS = 1
    MAX_INSTALLMENTS = 24
    OVERPAYMENT_TOLERANCE = Decimal("1.10")  # up to 110% of the installment amount
    MAX_NOTES_LENGTH = 500

    def validate_plan_inputs(self, inputs: PlanInputs) -> None:
        """
        Run all schedule checks. Raises ValidationError if any check fails.
        """
        self._validate_amounts(inputs)
        self._validate_schedule(inputs)
        self._validate_initial_payment(inputs)

    def _validate_amounts(self, inputs: PlanInputs) -> None:
        if inputs.total_course_value <= 0:
            raise ValidationError.for_field(
                "total_course_value",
                f"Total course value must be positive, got: {inputs.total_course_value}",
            )

        if not (0 <= inputs.commission_rate_percent <= 100):
            raise ValidationError.for_field(
                "commission_rate_percent",
                f"Commission rate must be between 0 and 100, got: {inputs.commission_rate_percent}",
            )

        for name in ("materials_cost", "admin_fees", "other_fees"):
            if getattr(inputs, name) < 0:
                raise ValidationError.for_field(name, f"{name} cannot be negative, got: {getattr(inputs, name)}")

        if inputs.total_fees >= inputs.total_course_value:
            raise ValidationError.for_field(
                "materials_cost",
                "Total fees cannot exceed or equal total course value",
            )

    def _validate_schedule(self, inputs: PlanInputs) -> None:
        count = inputs.number_of_installments
        if not (self.MIN_INSTALLMENTS <= count <= self.MAX_INSTALLMENTS):
            raise ValidationError.for_field(
                "number_of_installments",
                f"Number of installments must be between {self.MIN_INSTALLMENTS} and "
                f"{self.MAX_INSTALLMENTS}, got: {count}",
            )

        if inputs.student_lead_time_days < 0:
            raise ValidationError.for_field(
                "student_lead_time_days",
                f"Lead time cannot be negative, got: {inputs.student_lead_time_days}",
            )

        if inputs.payment_frequency == PaymentFrequency.CUSTOM:
            custom = inputs.custom_college_due_dates
            if custom and len(custom) != count:
                raise ValidationError.for_field(
                    "custom_college_due_dates",
                    f"Expected {count} custom due dates, got: {len(custom)}",
                )
        elif inputs.custom_college_due_dates:
            raise ValidationError.for_field(
                "custom_college_due_dates",
                "Custom due dates are only allowed with the 'custom' payment frequency",
            )
        elif inputs.first_college_due_date is None:
            raise ValidationError.for_field(
                "first_college_due_date",
                "First college due date is required for monthly and quarterly schedules",
            )

    def _validate_initial_payment(self, inputs: PlanInputs) -> None:
        amount = inputs.initial_payment_amount
        if amount < 0:
            raise ValidationError.for_field(
                "initial_payment_amount", f"Initial payment cannot be negative, got: {amount}"
            )

        if amount > 0 and inputs.initial_payment_due_date is None:
            raise ValidationError.for_field(
                "initial_payment_due_date",
                "Initial payment due date is required when amount is specified",
            )

        commissionable = calculate_commissionable_value(
            inputs.total_course_value, inputs.materials_cost, inputs.admin_fees, inputs.other_fees
        )
        if amount > commissionable:
            raise ValidationError.for_field(
                "initial_payment_amount",
                "Initial payment amount cannot exceed commissionable value",
            )

    def validate_payment(self, request: PaymentRequest, installment: Installment, today: date) -> None:
        """Validate a payment against the installment it settles."""
        amount = request.paid_amount

        # zero-amount installments (initial payment covered everything) settle with 0
        if amount < 0 or (amount == 0 and installment.amount > 0):
            raise ValidationError.for_field("paid_amount", f"Payment amount must be positive, got: {amount}")

        if amount.as_tuple().exponent < -2:
            raise ValidationError.for_field("paid_amount", "Payment amount can have at most 2 decimal places")

        max_allowed = installment.amount * self.OVERPAYMENT_TOLERANCE
        if amount > max_allowed:
            message = (
                f"Payment amount cannot exceed {max_allowed:.2f} "
                f"(110% of installment amount)"
            )
            raise ValidationError.for_field("paid_amount", message)

        if installment.counts_as_paid and installment.paid_amount is not None and amount < installment.paid_amount:
            raise ValidationError.for_field(
                "paid_amount",
                f"Payment amount cannot be lower than the {installment.paid_amount:.2f} already recorded",
            )

        if request.paid_date > today:
            raise ValidationError.for_field("paid_date", "Payment date cannot be in the future")

        if request.notes and len(request.notes) > self.MAX_NOTES_LENGTH:
            raise ValidationError.for_field(
                "notes", f"Notes cannot exceed {self.MAX_NOTES_LENGTH} characters"
            )
