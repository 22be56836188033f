"""
Status Sweep Job

Scheduled, idempotent pass over active plans that marks pending
installments overdue and flags due-soon ones. The scheduler supplies
`today`; each run is written to an execution log.
"""

import logging
import time as timer
from datetime import date, datetime, time, timezone

from .calculators import StatusClassifier
from .models import InstallmentStatus, JobRun, PlanStatus, SweepReport
from .store import PlanStore

logger = logging.getLogger(__name__)


class StatusSweep:
    """Applies StatusClassifier decisions to every installment of active plans."""

    def __init__(self, store: PlanStore, classifier: StatusClassifier | None = None):
        self.store = store
        self.classifier = classifier or StatusClassifier()

    def run(
        self,
        today: date,
        due_soon_window_days: int = StatusClassifier.DEFAULT_DUE_SOON_WINDOW_DAYS,
        current_time: time | None = None,
        overdue_cutoffs: dict | None = None,
    ) -> SweepReport:
        """
        Sweep all active plans.

        `overdue_cutoffs` maps agency_id to that agency's overdue cutoff
        time of day. A failed row is recorded in the report and the sweep
        moves on.
        """
        report = SweepReport(today=today)
        overdue_cutoffs = overdue_cutoffs or {}

        for plan in self.store.list_plans(status=PlanStatus.ACTIVE):
            agency = report.agency(plan.agency_id)
            for installment in plan.installments:
                decision = self.classifier.classify(
                    installment,
                    today,
                    due_soon_window_days,
                    current_time=current_time,
                    overdue_cutoff_time=overdue_cutoffs.get(plan.agency_id),
                )
                if decision.is_due_soon:
                    report.due_soon_ids.append(installment.id)

                changed = decision.transitions or decision.is_due_soon != installment.is_due_soon
                if not changed:
                    continue

                previous = installment.status
                if decision.transitions:
                    installment.status = decision.new_status
                installment.is_due_soon = decision.is_due_soon
                try:
                    self.store.save_installment(installment)
                except Exception as e:
                    logger.error(f"Failed to update installment {installment.id}: {e}")
                    report.errors.append({"installment_id": installment.id, "error": str(e)})
                    continue

                if decision.transitions:
                    report.updated += 1
                    agency.updated_count += 1
                    if previous == InstallmentStatus.PENDING and decision.new_status == InstallmentStatus.OVERDUE:
                        agency.pending_to_overdue += 1
                        report.newly_overdue_ids.append(installment.id)

        return report


class StatusSweepJob:
    """Runs a StatusSweep and records the outcome in an execution log."""

    JOB_NAME = "update-installment-statuses"

    def __init__(self, sweep: StatusSweep):
        self.sweep = sweep
        self.runs: list[JobRun] = []

    def execute(
        self,
        today: date,
        due_soon_window_days: int = StatusClassifier.DEFAULT_DUE_SOON_WINDOW_DAYS,
        current_time: time | None = None,
        overdue_cutoffs: dict | None = None,
    ) -> tuple[JobRun, SweepReport]:
        """
        Execute one run. The run is failed only when the sweep itself raises,
        in which case the error is logged and re-raised for the scheduler to
        retry. Per-row failures are counted in the run metadata.
        """
        run = JobRun(job_name=self.JOB_NAME, started_at=datetime.now(timezone.utc))
        self.runs.append(run)
        started = timer.monotonic()
        logger.info(f"Starting {self.JOB_NAME} for {today.isoformat()}")

        try:
            report = self.sweep.run(today, due_soon_window_days, current_time, overdue_cutoffs)
        except Exception as e:
            run.status = "failed"
            run.error_message = str(e)
            logger.error(f"{self.JOB_NAME} failed: {e}", exc_info=True)
            raise
        else:
            run.status = "success"
            run.records_updated = report.updated
            run.metadata = {
                "failed_rows": len(report.errors),
                "due_soon": len(report.due_soon_ids),
                "agencies": len(report.agencies),
            }
            if report.errors:
                run.error_message = f"{len(report.errors)} installment update(s) failed"
        finally:
            run.completed_at = datetime.now(timezone.utc)
            run.duration_ms = int((timer.monotonic() - started) * 1000)

        logger.info(
            f"Finished {self.JOB_NAME}: status={run.status} "
            f"updated={run.records_updated} duration={run.duration_ms}ms"
        )
        return run, report
