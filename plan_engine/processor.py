"""
Payment Plan Processor - Main Orchestrator

Exposes the engine's entry points: schedule generation, payment
recording and the status sweep.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Dict

from .calculators import (
    CommissionCalculator,
    PaymentRecorder,
    ScheduleGenerator,
    StatusClassifier,
)
from .jobs import StatusSweep, StatusSweepJob
from .models import (
    PaymentPlan,
    PaymentRequest,
    PaymentResult,
    PlanInputs,
    ScheduleResult,
    SweepReport,
    new_id,
    parse_date,
)
from .output import OutputBuilder
from .store import InMemoryPlanStore, PlanStore
from .validators import InputValidator

logger = logging.getLogger(__name__)


class PaymentPlanProcessor:
    """
    Main orchestrator for payment plans.

    1. generate_installments - validate inputs, build the schedule (no persistence)
    2. create_plan - generate and persist a plan with its installments
    3. record_payment - apply a payment, recompute aggregates, persist both together
    4. run_status_sweep - mark overdue / due-soon installments for a given day
    """

    def __init__(self, store: PlanStore | None = None):
        self.store = store or InMemoryPlanStore()
        self.validator = InputValidator()
        self.commission_calculator = CommissionCalculator()
        self.schedule_generator = ScheduleGenerator(self.commission_calculator)
        self.payment_recorder = PaymentRecorder(self.commission_calculator)
        self.status_classifier = StatusClassifier()
        self.sweep_job = StatusSweepJob(StatusSweep(self.store, self.status_classifier))
        self.output_builder = OutputBuilder()

    def generate_installments(self, inputs: PlanInputs, payment_plan_id: str | None = None) -> ScheduleResult:
        """Validate inputs and return the draft schedule."""
        self.validator.validate_plan_inputs(inputs)
        return self.schedule_generator.generate(inputs, payment_plan_id)

    def create_plan(
        self,
        inputs: PlanInputs,
        agency_id: str | None = None,
        enrollment_id: str | None = None,
    ) -> PaymentPlan:
        """Generate a schedule and persist it as a new active plan."""
        plan_id = new_id()
        schedule = self.generate_installments(inputs, plan_id)
        summary = schedule.summary

        plan = PaymentPlan(
            id=plan_id,
            total_amount=summary.total_course_value,
            commission_rate_percent=inputs.commission_rate_percent,
            commissionable_value=summary.commissionable_value,
            expected_commission=summary.expected_commission,
            materials_cost=inputs.materials_cost,
            admin_fees=inputs.admin_fees,
            other_fees=inputs.other_fees,
            gst_inclusive=inputs.gst_inclusive,
            agency_id=agency_id,
            enrollment_id=enrollment_id,
            installments=schedule.installments,
        )
        self.payment_recorder.recalculate(plan)
        stored = self.store.add_plan(plan)
        logger.info(f"Created payment plan {plan_id} with {len(plan.installments)} installments")
        return stored

    def activate_plan(self, plan_id: str) -> PaymentPlan:
        """Promote every draft installment of a plan to pending."""
        plan = self.store.get_plan(plan_id)
        activated = sum(1 for i in plan.installments if i.activate())
        saved = self.store.save_plan(plan)
        logger.info(f"Activated {activated} installments on plan {plan_id}")
        return saved

    def record_payment(self, request: PaymentRequest, today: date | None = None) -> PaymentResult:
        """
        Record a payment against one installment.

        Installment and plan are written in one save; a concurrent
        writer makes the save raise ConflictError.
        """
        today = today or date.today()
        plan = self.store.get_plan_for_installment(request.installment_id)
        installment = plan.find_installment(request.installment_id)

        self.validator.validate_payment(request, installment, today)
        result = self.payment_recorder.record(plan, request, recorded_at=datetime.now(timezone.utc))

        saved = self.store.save_plan(plan)
        result.installment = saved.find_installment(request.installment_id)

        logger.info(
            f"Recorded payment of {request.paid_amount} on installment "
            f"#{installment.installment_number} of plan {plan.id} ({result.installment.status.value})"
        )
        if result.plan.plan_completed:
            logger.info(f"Payment plan {plan.id} completed")
        return result

    def run_status_sweep(
        self,
        today: date,
        due_soon_window_days: int = StatusClassifier.DEFAULT_DUE_SOON_WINDOW_DAYS,
        current_time: time | None = None,
        overdue_cutoffs: dict | None = None,
    ) -> SweepReport:
        """Run the sweep through the job wrapper so every run is logged."""
        _, report = self.sweep_job.execute(today, due_soon_window_days, current_time, overdue_cutoffs)
        return report

    # -------------------------------------------------------------------------
    # Dict in / dict out (API usage)
    # -------------------------------------------------------------------------

    def generate_installments_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        result = self.generate_installments(PlanInputs.from_dict(data))
        return self.output_builder.schedule(result)

    def create_plan_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        plan = self.create_plan(
            PlanInputs.from_dict(data),
            agency_id=data.get("agency_id"),
            enrollment_id=data.get("enrollment_id"),
        )
        return self.output_builder.plan(plan)

    def activate_plan_from_dict(self, plan_id: str) -> Dict[str, Any]:
        return self.output_builder.plan(self.activate_plan(plan_id))

    def record_payment_from_dict(self, installment_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        request = PaymentRequest.from_dict(installment_id, data)
        return self.output_builder.payment(self.record_payment(request))

    def run_status_sweep_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        today = parse_date(data.get("today"), "today") or date.today()
        window = data.get("due_soon_window_days", StatusClassifier.DEFAULT_DUE_SOON_WINDOW_DAYS)
        run, report = self.sweep_job.execute(today, window)
        return {
            "job": self.output_builder.job_run(run),
            "report": self.output_builder.sweep(report),
        }
