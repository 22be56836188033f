"""
Status Classifier

Pure timing decisions for the scheduled status sweep. The current date
(and optionally time of day) is always passed in, never read from a clock.
"""

from datetime import date, time

from ..models import Installment, InstallmentStatus, TimingDecision


class StatusClassifier:
    """Decides overdue transitions and due-soon flags."""

    DEFAULT_DUE_SOON_WINDOW_DAYS = 7
    OVERDUE_CANDIDATES = (InstallmentStatus.PENDING,)
    DUE_SOON_CANDIDATES = (InstallmentStatus.PENDING, InstallmentStatus.OVERDUE)

    def classify(
        self,
        installment: Installment,
        today: date,
        due_soon_window_days: int = DEFAULT_DUE_SOON_WINDOW_DAYS,
        current_time: time | None = None,
        overdue_cutoff_time: time | None = None,
    ) -> TimingDecision:
        """
        Classify one installment against `today`.

        pending past its student due date becomes overdue. When both
        current_time and overdue_cutoff_time are given, a pending installment
        due today also becomes overdue once the cutoff has passed.
        Draft, paid, partial and cancelled installments are never touched.
        """
        decision = TimingDecision(installment_id=installment.id)
        due = installment.student_due_date
        if due is None:
            return decision

        if installment.status in self.OVERDUE_CANDIDATES and self._is_overdue(
            due, today, current_time, overdue_cutoff_time
        ):
            decision.new_status = InstallmentStatus.OVERDUE

        if installment.status in self.DUE_SOON_CANDIDATES:
            days_until_due = (due - today).days
            decision.is_due_soon = 0 <= days_until_due <= due_soon_window_days

        return decision

    @staticmethod
    def _is_overdue(due: date, today: date, current_time: time | None, cutoff: time | None) -> bool:
        if due < today:
            return True
        if due == today and current_time is not None and cutoff is not None:
            return current_time > cutoff
        return False


def classify_installment_timing(
    installment: Installment,
    today: date,
    due_soon_window_days: int = StatusClassifier.DEFAULT_DUE_SOON_WINDOW_DAYS,
) -> TimingDecision:
    return StatusClassifier().classify(installment, today, due_soon_window_days)
