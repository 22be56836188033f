"""
Domain Models for the Payment Plan Engine

These dataclasses provide type-safe representations of payment plans,
installments, payments and sweep results.
All monetary values use Decimal for precision.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum

from .errors import ValidationError

# =============================================================================
# ENUMS
# =============================================================================


class PlanStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InstallmentStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PAID = "paid"
    PARTIAL = "partial"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    CUSTOM = "custom"


# =============================================================================
# PARSING HELPERS
# =============================================================================


def to_decimal(value, field_name: str, default: str | None = None) -> Decimal:
    """Convert a JSON number (or numeric string) to Decimal via str()."""
    if value is None:
        if default is None:
            raise ValidationError.for_field(field_name, f"{field_name} is required")
        return Decimal(default)
    if isinstance(value, bool):
        raise ValidationError.for_field(field_name, f"{field_name} must be a number, got: {value}")
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError.for_field(field_name, f"{field_name} must be a number, got: {value}")
    if not result.is_finite():
        raise ValidationError.for_field(field_name, f"{field_name} must be a finite number, got: {value}")
    return result


def parse_date(value, field_name: str) -> date | None:
    """Parse a date from a date/datetime object or an ISO string (date part only)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            raise ValidationError.for_field(field_name, f"Invalid date format for {field_name}: {value}")
    raise ValidationError.for_field(field_name, f"Invalid date format for {field_name}: {value}")


def new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# INPUT MODELS
# =============================================================================


@dataclass
class PlanInputs:
    """Wizard input for a new payment plan and its installment schedule."""

    total_course_value: Decimal
    commission_rate_percent: Decimal
    first_college_due_date: date | None
    number_of_installments: int = 1
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    materials_cost: Decimal = Decimal("0")
    admin_fees: Decimal = Decimal("0")
    other_fees: Decimal = Decimal("0")
    gst_inclusive: bool = True
    initial_payment_amount: Decimal = Decimal("0")
    initial_payment_due_date: date | None = None
    initial_payment_paid: bool = False
    student_lead_time_days: int = 7
    custom_college_due_dates: list[date] = field(default_factory=list)

    @property
    def total_fees(self) -> Decimal:
        return self.materials_cost + self.admin_fees + self.other_fees

    @classmethod
    def from_dict(cls, data: dict) -> "PlanInputs":
        frequency = data.get("payment_frequency", PaymentFrequency.MONTHLY.value)
        try:
            frequency = PaymentFrequency(frequency)
        except ValueError:
            raise ValidationError.for_field(
                "payment_frequency",
                "Payment frequency must be 'monthly', 'quarterly', or 'custom'",
            )
        count = data.get("number_of_installments", 1)
        lead_time = data.get("student_lead_time_days", 7)
        if not isinstance(count, int) or isinstance(count, bool):
            raise ValidationError.for_field("number_of_installments", "Number of installments must be an integer")
        if not isinstance(lead_time, int) or isinstance(lead_time, bool):
            raise ValidationError.for_field("student_lead_time_days", "Lead time must be an integer")
        gst_inclusive = data.get("gst_inclusive", True)
        initial_paid = data.get("initial_payment_paid", False)
        for name, flag in (("gst_inclusive", gst_inclusive), ("initial_payment_paid", initial_paid)):
            if not isinstance(flag, bool):
                raise ValidationError.for_field(name, f"{name} must be true or false, got: {flag}")
        custom_dates = [
            parse_date(d, "custom_college_due_dates") for d in data.get("custom_college_due_dates") or []
        ]
        return cls(
            total_course_value=to_decimal(data.get("total_course_value"), "total_course_value"),
            commission_rate_percent=to_decimal(data.get("commission_rate_percent"), "commission_rate_percent"),
            first_college_due_date=parse_date(data.get("first_college_due_date"), "first_college_due_date"),
            number_of_installments=count,
            payment_frequency=frequency,
            materials_cost=to_decimal(data.get("materials_cost"), "materials_cost", "0"),
            admin_fees=to_decimal(data.get("admin_fees"), "admin_fees", "0"),
            other_fees=to_decimal(data.get("other_fees"), "other_fees", "0"),
            gst_inclusive=gst_inclusive,
            initial_payment_amount=to_decimal(data.get("initial_payment_amount"), "initial_payment_amount", "0"),
            initial_payment_due_date=parse_date(data.get("initial_payment_due_date"), "initial_payment_due_date"),
            initial_payment_paid=initial_paid,
            student_lead_time_days=lead_time,
            custom_college_due_dates=[d for d in custom_dates if d is not None],
        )


@dataclass
class PaymentRequest:
    """A payment received for one installment."""

    installment_id: str
    paid_date: date
    paid_amount: Decimal
    notes: str | None = None

    @classmethod
    def from_dict(cls, installment_id: str, data: dict) -> "PaymentRequest":
        paid_date = parse_date(data.get("paid_date"), "paid_date")
        if paid_date is None:
            raise ValidationError.for_field("paid_date", "paid_date is required")
        return cls(
            installment_id=installment_id,
            paid_date=paid_date,
            paid_amount=to_decimal(data.get("paid_amount"), "paid_amount"),
            notes=data.get("notes") or None,
        )


# =============================================================================
# ENTITIES
# =============================================================================


@dataclass
class PaymentEvent:
    """One recorded payment. Installments keep these append-only."""

    paid_date: date
    paid_amount: Decimal
    notes: str | None = None
    recorded_at: datetime | None = None


@dataclass
class Installment:
    """A single scheduled payment within a plan (0 = initial payment)."""

    id: str
    payment_plan_id: str | None
    installment_number: int
    amount: Decimal
    student_due_date: date | None
    college_due_date: date | None
    is_initial_payment: bool = False
    generates_commission: bool = True
    status: InstallmentStatus = InstallmentStatus.DRAFT
    paid_amount: Decimal | None = None
    paid_date: date | None = None
    payment_notes: str | None = None
    payment_history: list[PaymentEvent] = field(default_factory=list)
    is_due_soon: bool = False
    version: int = 0

    def activate(self) -> bool:
        """
        Promote a generated (draft) installment to pending.

        Only draft installments move; everything else is left as-is.
        Returns True when the status changed.
        """
        if self.status != InstallmentStatus.DRAFT:
            return False
        self.status = InstallmentStatus.PENDING
        return True

    @property
    def counts_as_paid(self) -> bool:
        """Whether paid_amount contributes to plan totals."""
        return self.status in (InstallmentStatus.PAID, InstallmentStatus.PARTIAL)


@dataclass
class PaymentPlan:
    """A student's payment plan with cached commission figures."""

    id: str
    total_amount: Decimal
    commission_rate_percent: Decimal
    commissionable_value: Decimal
    expected_commission: Decimal
    materials_cost: Decimal = Decimal("0")
    admin_fees: Decimal = Decimal("0")
    other_fees: Decimal = Decimal("0")
    gst_inclusive: bool = True
    earned_commission: Decimal = Decimal("0")
    status: PlanStatus = PlanStatus.ACTIVE
    agency_id: str | None = None
    enrollment_id: str | None = None
    installments: list[Installment] = field(default_factory=list)
    version: int = 0

    def find_installment(self, installment_id: str) -> Installment | None:
        for installment in self.installments:
            if installment.id == installment_id:
                return installment
        return None


# =============================================================================
# OUTPUT / RESULT MODELS
# =============================================================================


@dataclass
class GenerationSummary:
    """Headline figures for a generated schedule."""

    total_course_value: Decimal
    commissionable_value: Decimal
    expected_commission: Decimal
    initial_payment: Decimal
    total_installments: int
    amount_per_installment: Decimal


@dataclass
class ScheduleResult:
    """Installments produced by the schedule generator."""

    installments: list[Installment]
    summary: GenerationSummary


@dataclass
class PlanAggregates:
    """Plan-level figures recomputed after a payment."""

    plan_id: str
    total_paid: Decimal
    earned_commission: Decimal
    status: PlanStatus
    plan_completed: bool = False


@dataclass
class PaymentResult:
    """Installment and plan deltas produced together by one payment."""

    installment: Installment
    plan: PlanAggregates
    previous_status: InstallmentStatus
    previous_paid_amount: Decimal | None = None
    previous_paid_date: date | None = None


@dataclass
class TimingDecision:
    """What the status sweep should do with one installment."""

    installment_id: str
    new_status: InstallmentStatus | None = None
    is_due_soon: bool = False

    @property
    def transitions(self) -> bool:
        return self.new_status is not None


@dataclass
class AgencySweepResult:
    """Per-agency counts for one sweep."""

    agency_id: str | None
    updated_count: int = 0
    pending_to_overdue: int = 0


@dataclass
class SweepReport:
    """Outcome of one status sweep."""

    today: date
    updated: int = 0
    newly_overdue_ids: list[str] = field(default_factory=list)
    due_soon_ids: list[str] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    agencies: dict = field(default_factory=dict)

    def agency(self, agency_id: str | None) -> AgencySweepResult:
        if agency_id not in self.agencies:
            self.agencies[agency_id] = AgencySweepResult(agency_id=agency_id)
        return self.agencies[agency_id]


@dataclass
class JobRun:
    """Execution log entry for a scheduled job."""

    job_name: str
    started_at: datetime
    completed_at: datetime | None = None
    duration_ms: int | None = None
    records_updated: int = 0
    status: str = "running"
    error_message: str | None = None
    metadata: dict = field(default_factory=dict)
