"""
Plan Store

Persistence boundary for plans and installments. Production deployments
back this with the database; InMemoryPlanStore serves local development
and tests.

Reads return copies. Writes check the version that was read and raise
ConflictError when another writer got there first.
"""

import copy
import threading

from .errors import ConflictError, NotFoundError
from .models import Installment, PaymentPlan, PlanStatus


class PlanStore:
    """Interface the processor and sweep job depend on."""

    def add_plan(self, plan: PaymentPlan) -> PaymentPlan:
        raise NotImplementedError

    def get_plan(self, plan_id: str) -> PaymentPlan:
        raise NotImplementedError

    def get_plan_for_installment(self, installment_id: str) -> PaymentPlan:
        raise NotImplementedError

    def list_plans(self, status: PlanStatus | None = None) -> list[PaymentPlan]:
        raise NotImplementedError

    def save_plan(self, plan: PaymentPlan) -> PaymentPlan:
        """Write plan and all its installments as one unit."""
        raise NotImplementedError

    def save_installment(self, installment: Installment) -> Installment:
        raise NotImplementedError


class InMemoryPlanStore(PlanStore):
    """Dict-backed store with optimistic version checks."""

    def __init__(self):
        self._plans: dict[str, PaymentPlan] = {}
        self._installment_index: dict[str, str] = {}
        self._lock = threading.Lock()

    def add_plan(self, plan: PaymentPlan) -> PaymentPlan:
        with self._lock:
            stored = copy.deepcopy(plan)
            self._plans[stored.id] = stored
            for installment in stored.installments:
                installment.payment_plan_id = stored.id
                self._installment_index[installment.id] = stored.id
            return copy.deepcopy(stored)

    def get_plan(self, plan_id: str) -> PaymentPlan:
        with self._lock:
            return copy.deepcopy(self._get(plan_id))

    def get_plan_for_installment(self, installment_id: str) -> PaymentPlan:
        with self._lock:
            plan_id = self._installment_index.get(installment_id)
            if plan_id is None:
                raise NotFoundError(f"Installment not found: {installment_id}")
            return copy.deepcopy(self._get(plan_id))

    def list_plans(self, status: PlanStatus | None = None) -> list[PaymentPlan]:
        with self._lock:
            return [
                copy.deepcopy(p) for p in self._plans.values()
                if status is None or p.status == status
            ]

    def save_plan(self, plan: PaymentPlan) -> PaymentPlan:
        with self._lock:
            current = self._get(plan.id)
            if current.version != plan.version:
                raise ConflictError(
                    f"Payment plan {plan.id} was modified concurrently "
                    f"(version {plan.version}, stored {current.version})"
                )
            stored_versions = {i.id: i.version for i in current.installments}
            for installment in plan.installments:
                if stored_versions.get(installment.id, installment.version) != installment.version:
                    raise ConflictError(f"Installment {installment.id} was modified concurrently")

            stored = copy.deepcopy(plan)
            stored.version += 1
            for installment, before in zip(stored.installments, plan.installments):
                if installment != self._find(current, before.id):
                    installment.version += 1
            self._plans[stored.id] = stored
            return copy.deepcopy(stored)

    def save_installment(self, installment: Installment) -> Installment:
        with self._lock:
            plan_id = self._installment_index.get(installment.id)
            if plan_id is None:
                raise NotFoundError(f"Installment not found: {installment.id}")
            plan = self._plans[plan_id]
            for index, current in enumerate(plan.installments):
                if current.id != installment.id:
                    continue
                if current.version != installment.version:
                    raise ConflictError(f"Installment {installment.id} was modified concurrently")
                stored = copy.deepcopy(installment)
                stored.version += 1
                plan.installments[index] = stored
                return copy.deepcopy(stored)
            raise NotFoundError(f"Installment not found: {installment.id}")

    def _get(self, plan_id: str) -> PaymentPlan:
        plan = self._plans.get(plan_id)
        if plan is None:
            raise NotFoundError(f"Payment plan not found: {plan_id}")
        return plan

    @staticmethod
    def _find(plan: PaymentPlan, installment_id: str) -> Installment | None:
        return plan.find_installment(installment_id)
