"""
Output Builder

Converts engine results into JSON-ready dictionaries for API responses.
"""

from datetime import date, datetime
from decimal import Decimal

from .models import (
    Installment,
    JobRun,
    PaymentPlan,
    PaymentResult,
    ScheduleResult,
    SweepReport,
)


def to_money(value: Decimal | None) -> float | None:
    """Convert Decimal to float with 2 decimal places."""
    if value is None:
        return None
    return round(float(value), 2)


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class OutputBuilder:
    """Builds API response payloads."""

    def installment(self, installment: Installment) -> dict:
        return {
            "id": installment.id,
            "payment_plan_id": installment.payment_plan_id,
            "installment_number": installment.installment_number,
            "amount": to_money(installment.amount),
            "student_due_date": _iso(installment.student_due_date),
            "college_due_date": _iso(installment.college_due_date),
            "is_initial_payment": installment.is_initial_payment,
            "generates_commission": installment.generates_commission,
            "status": installment.status.value,
            "paid_amount": to_money(installment.paid_amount),
            "paid_date": _iso(installment.paid_date),
            "payment_notes": installment.payment_notes,
            "is_due_soon": installment.is_due_soon,
            "payment_history": [
                {
                    "paid_date": _iso(event.paid_date),
                    "paid_amount": to_money(event.paid_amount),
                    "notes": event.notes,
                    "recorded_at": _iso(event.recorded_at),
                }
                for event in installment.payment_history
            ],
        }

    def schedule(self, result: ScheduleResult) -> dict:
        summary = result.summary
        return {
            "installments": [self.installment(i) for i in result.installments],
            "summary": {
                "total_course_value": to_money(summary.total_course_value),
                "commissionable_value": to_money(summary.commissionable_value),
                "expected_commission": to_money(summary.expected_commission),
                "initial_payment": to_money(summary.initial_payment),
                "total_installments": summary.total_installments,
                "amount_per_installment": to_money(summary.amount_per_installment),
            },
        }

    def plan(self, plan: PaymentPlan) -> dict:
        return {
            "id": plan.id,
            "agency_id": plan.agency_id,
            "enrollment_id": plan.enrollment_id,
            "status": plan.status.value,
            "total_amount": to_money(plan.total_amount),
            "commission_rate_percent": float(plan.commission_rate_percent),
            "materials_cost": to_money(plan.materials_cost),
            "admin_fees": to_money(plan.admin_fees),
            "other_fees": to_money(plan.other_fees),
            "gst_inclusive": plan.gst_inclusive,
            "commissionable_value": to_money(plan.commissionable_value),
            "expected_commission": to_money(plan.expected_commission),
            "earned_commission": to_money(plan.earned_commission),
            "installments": [self.installment(i) for i in plan.installments],
        }

    def payment(self, result: PaymentResult) -> dict:
        """Installment and plan deltas, plus the values they replaced."""
        return {
            "installment": self.installment(result.installment),
            "payment_plan": {
                "id": result.plan.plan_id,
                "status": result.plan.status.value,
                "earned_commission": to_money(result.plan.earned_commission),
                "total_paid": to_money(result.plan.total_paid),
                "completed": result.plan.plan_completed,
            },
            "previous": {
                "status": result.previous_status.value,
                "paid_amount": to_money(result.previous_paid_amount),
                "paid_date": _iso(result.previous_paid_date),
            },
        }

    def sweep(self, report: SweepReport) -> dict:
        return {
            "today": _iso(report.today),
            "updated": report.updated,
            "newly_overdue_ids": report.newly_overdue_ids,
            "due_soon_ids": report.due_soon_ids,
            "errors": report.errors,
            "agencies": [
                {
                    "agency_id": result.agency_id,
                    "updated_count": result.updated_count,
                    "transitions": {"pending_to_overdue": result.pending_to_overdue},
                }
                for result in report.agencies.values()
            ],
        }

    def job_run(self, run: JobRun) -> dict:
        return {
            "job_name": run.job_name,
            "started_at": _iso(run.started_at),
            "completed_at": _iso(run.completed_at),
            "duration_ms": run.duration_ms,
            "records_updated": run.records_updated,
            "status": run.status,
            "error_message": run.error_message,
            "metadata": run.metadata,
        }
