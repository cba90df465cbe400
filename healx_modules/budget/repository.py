"""
Budget plan repositories (``healx_modules.budget.repository``).

Responsibility
--------------
Persistence seam of ``BudgetPlanStore``.  The store owns the plan
lifecycle rules; a repository adds, reads, lists and deletes plans,
records which plan is active through its status, and always lists plans
in creation order.

* ``InMemoryBudgetPlanRepository`` -- process-local, for tests and
  single-run CLI use.
* ``SqlBudgetPlanRepository`` -- SQLAlchemy, for any supported URL
  (SQLite, PostgreSQL); plans survive restarts.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from healx_kernel.db.engine import session_scope
from healx_kernel.logging_config import get_logger
from healx_modules.budget.models import BudgetPlan, PlanStatus
from healx_modules.budget.orm import BudgetPlanModel

logger = get_logger("modules.budget.repository")


_ADD_ATTEMPTS = 3


class BudgetPlanRepository(Protocol):
    """Storage contract for budget plans."""

    def add(self, plan: BudgetPlan) -> None: ...

    def get(self, plan_id: UUID) -> BudgetPlan | None: ...

    def list(self) -> list[BudgetPlan]: ...

    def delete(self, plan_id: UUID) -> bool: ...

    def mark_active(self, plan_id: UUID | None) -> None:
        """Make ``plan_id`` the only ACTIVE plan; None leaves no plan active."""
        ...


class InMemoryBudgetPlanRepository:
    """Dict-backed repository; insertion order is creation order."""

    def __init__(self) -> None:
        self._plans: dict[UUID, BudgetPlan] = {}
        self._lock = threading.Lock()

    def add(self, plan: BudgetPlan) -> None:
        with self._lock:
            self._plans[plan.id] = plan

    def get(self, plan_id: UUID) -> BudgetPlan | None:
        with self._lock:
            return self._plans.get(plan_id)

    def list(self) -> list[BudgetPlan]:
        with self._lock:
            return list(self._plans.values())

    def delete(self, plan_id: UUID) -> bool:
        with self._lock:
            return self._plans.pop(plan_id, None) is not None

    def mark_active(self, plan_id: UUID | None) -> None:
        with self._lock:
            for current in list(self._plans.values()):
                if current.id == plan_id:
                    status = PlanStatus.ACTIVE
                elif current.status is PlanStatus.ACTIVE:
                    status = PlanStatus.DRAFT
                else:
                    continue
                self._plans[current.id] = replace(current, status=status)


class SqlBudgetPlanRepository:
    """
    SQLAlchemy-backed repository.

    ``sequence`` is unique.  Adds through one repository are serialized;
    a conflicting add from another process is retried with the next
    sequence number.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory
        self._lock = threading.Lock()

    def add(self, plan: BudgetPlan) -> None:
        with self._lock:
            for attempt in range(1, _ADD_ATTEMPTS + 1):
                try:
                    with session_scope(self._session_factory) as session:
                        current = session.scalar(select(func.max(BudgetPlanModel.sequence)))
                        session.add(BudgetPlanModel.from_dto(plan, sequence=(current or 0) + 1))
                    break
                except IntegrityError:
                    if attempt == _ADD_ATTEMPTS:
                        raise
                    logger.warning("budget_plan_sequence_conflict", extra={
                        "plan_id": str(plan.id),
                        "attempt": attempt,
                    })
        logger.debug("budget_plan_persisted", extra={"plan_id": str(plan.id)})

    def get(self, plan_id: UUID) -> BudgetPlan | None:
        with session_scope(self._session_factory) as session:
            model = session.get(BudgetPlanModel, plan_id)
            return model.to_dto() if model is not None else None

    def list(self) -> list[BudgetPlan]:
        with session_scope(self._session_factory) as session:
            models = session.scalars(
                select(BudgetPlanModel).order_by(BudgetPlanModel.sequence)
            ).all()
            return [m.to_dto() for m in models]

    def delete(self, plan_id: UUID) -> bool:
        with session_scope(self._session_factory) as session:
            model = session.get(BudgetPlanModel, plan_id)
            if model is None:
                return False
            session.delete(model)
            return True

    def mark_active(self, plan_id: UUID | None) -> None:
        with session_scope(self._session_factory) as session:
            demote = update(BudgetPlanModel).where(
                BudgetPlanModel.status == PlanStatus.ACTIVE.value,
            )
            if plan_id is not None:
                demote = demote.where(BudgetPlanModel.id != plan_id)
            session.execute(demote.values(status=PlanStatus.DRAFT.value))
            if plan_id is not None:
                session.execute(
                    update(BudgetPlanModel)
                    .where(BudgetPlanModel.id == plan_id)
                    .values(status=PlanStatus.ACTIVE.value)
                )
