"""
Budget Planning Service (``healx_modules.budget.service``).

Responsibility
--------------
``BudgetPlanStore`` owns the lifecycle of budget plans: validating the
creation form, materializing the quarter grid and projections from a
snapshot, keeping track of the active plan and deleting plans.

Architecture position
---------------------
**Modules layer** -- sole public entry point for plan management.
Persistence is delegated to an injected ``BudgetPlanRepository``; grid
generation to ``QuarterPlanner``.

Invariants enforced
-------------------
* Form validation completes before any quarter is generated.
* A plan is generated once; later snapshots never change it.
* The selection is persisted as plan status: the active plan is ACTIVE,
  every other plan DRAFT.  A new plan becomes active when nothing is
  active; a reopened store selects the ACTIVE plan, or the first plan
  when none is marked.
* Deleting the active plan moves the selection to the first remaining
  plan in creation order, or to none.
* Mutations of one plan id are serialized through ``plan_lock``; report
  rendering of that plan takes the same lock.

Failure modes
-------------
* ``InvalidPlanInputError`` -- blank name, non-integer years, start after
  end, span above the configured maximum, unknown plan type.
* ``PlanNotFoundError`` -- get/delete/set_active of an unknown id.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from uuid import UUID, uuid4

from healx_engines.snapshot import FinancialSnapshot
from healx_kernel.domain.clock import Clock, SystemClock
from healx_kernel.domain.jitter import JitterSource
from healx_kernel.exceptions import InvalidPlanInputError, PlanNotFoundError
from healx_kernel.logging_config import LogContext, get_logger
from healx_modules.budget.config import BudgetConfig
from healx_modules.budget.models import BudgetPlan, PlanFormInput, PlanStatus, PlanType
from healx_modules.budget.planner import QuarterPlanner
from healx_modules.budget.repository import BudgetPlanRepository, InMemoryBudgetPlanRepository

logger = get_logger("modules.budget.service")


class BudgetPlanStore:
    """
    Creates, lists, deletes and selects budget plans.

    Contract
    --------
    * ``create`` returns the stored plan; the value is independent of any
      snapshot taken afterwards.
    * ``active_plan`` is None only when there are no plans or the active
      plan was deleted with nothing left to fall back to.

    Guarantees
    ----------
    * Same form, snapshot, seed and clock give an identical quarter grid.
    * Clock is injectable for deterministic testing.
    """

    def __init__(
        self,
        repository: BudgetPlanRepository | None = None,
        config: BudgetConfig | None = None,
        clock: Clock | None = None,
    ):
        self._repository = repository or InMemoryBudgetPlanRepository()
        self._config = config or BudgetConfig.with_defaults()
        self._clock = clock or SystemClock()
        self._planner = QuarterPlanner(self._config, self._clock)

        self._locks: dict[UUID, threading.RLock] = {}
        self._locks_guard = threading.Lock()
        self._selection_lock = threading.RLock()

        existing = self._repository.list()
        marked = [p for p in existing if p.status is PlanStatus.ACTIVE]
        self._active_id: UUID | None = marked[0].id if marked else None
        if self._active_id is None and existing:
            self._active_id = existing[0].id
            self._repository.mark_active(self._active_id)

    # =========================================================================
    # Locking
    # =========================================================================

    @contextmanager
    def plan_lock(self, plan_id: UUID) -> Iterator[None]:
        """Serialize work on one plan id."""
        with self._locks_guard:
            lock = self._locks.setdefault(plan_id, threading.RLock())
        with lock:
            yield

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def create(
        self,
        form: PlanFormInput,
        snapshot: FinancialSnapshot,
        *,
        seed: int | None = None,
    ) -> BudgetPlan:
        name, start_year, end_year, plan_type, description = self._validate(form)

        plan_id = uuid4()
        with self.plan_lock(plan_id), LogContext.bind(plan_id=str(plan_id)):
            jitter = JitterSource(seed)
            quarters = self._planner.build_quarters(start_year, end_year, snapshot, jitter)
            projections = self._planner.build_projections(start_year, end_year, snapshot)

            with self._selection_lock:
                becomes_active = self._active_id is None
                plan = BudgetPlan(
                    id=plan_id,
                    name=name,
                    start_year=start_year,
                    end_year=end_year,
                    plan_type=plan_type,
                    status=PlanStatus.ACTIVE if becomes_active else PlanStatus.DRAFT,
                    quarters=quarters,
                    description=description,
                    created_at=self._clock.now(),
                    projections=projections,
                    jitter_seed=jitter.seed,
                )
                self._repository.add(plan)
                if becomes_active:
                    self._active_id = plan.id

            logger.info("budget_plan_created", extra={
                "plan_id": str(plan.id),
                "plan_name": plan.name,
                "plan_type": plan.plan_type.value,
                "start_year": plan.start_year,
                "end_year": plan.end_year,
                "quarters": len(plan.quarters),
                "quarters_with_actuals": sum(1 for q in plan.quarters if q.has_actual),
                "jitter_seed": plan.jitter_seed,
            })
        return plan

    def list(self) -> list[BudgetPlan]:
        return self._repository.list()

    def get(self, plan_id: UUID) -> BudgetPlan:
        plan = self._repository.get(plan_id)
        if plan is None:
            raise PlanNotFoundError(str(plan_id))
        return plan

    def delete(self, plan_id: UUID) -> None:
        with self.plan_lock(plan_id), LogContext.bind(plan_id=str(plan_id)):
            if not self._repository.delete(plan_id):
                raise PlanNotFoundError(str(plan_id))

            with self._selection_lock:
                fallback_id = None
                if self._active_id == plan_id:
                    remaining = self._repository.list()
                    self._active_id = remaining[0].id if remaining else None
                    self._repository.mark_active(self._active_id)
                    fallback_id = self._active_id

            logger.info("budget_plan_deleted", extra={
                "plan_id": str(plan_id),
                "active_plan_id": str(fallback_id) if fallback_id else None,
            })

    def set_active(self, plan_id: UUID) -> BudgetPlan:
        self.get(plan_id)
        with self._selection_lock:
            self._repository.mark_active(plan_id)
            self._active_id = plan_id
        logger.info("budget_plan_activated", extra={"plan_id": str(plan_id)})
        return self.get(plan_id)

    @property
    def active_plan(self) -> BudgetPlan | None:
        with self._selection_lock:
            active_id = self._active_id
        if active_id is None:
            return None
        return self._repository.get(active_id)

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate(self, form: PlanFormInput) -> tuple[str, int, int, PlanType, str]:
        name = form.name.strip() if isinstance(form.name, str) else ""
        if not name:
            raise InvalidPlanInputError("name", "must not be blank")

        start_year = _parse_year("start_year", form.start_year)
        end_year = _parse_year("end_year", form.end_year)
        if start_year > end_year:
            raise InvalidPlanInputError(
                "end_year", f"start year {start_year} is after end year {end_year}",
            )
        span = end_year - start_year + 1
        if span > self._config.max_span_years:
            raise InvalidPlanInputError(
                "end_year",
                f"plan spans {span} years; at most {self._config.max_span_years} allowed",
            )

        raw_type = form.plan_type.value if isinstance(form.plan_type, PlanType) else form.plan_type
        try:
            plan_type = PlanType(str(raw_type).strip().lower())
        except ValueError:
            raise InvalidPlanInputError(
                "plan_type",
                f"unknown plan type {raw_type!r}; expected one of "
                f"{[t.value for t in PlanType]}",
            ) from None

        description = "" if form.description is None else str(form.description)
        return name, start_year, end_year, plan_type, description


def _parse_year(field: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidPlanInputError(field, f"must be an integer year, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise InvalidPlanInputError(field, f"must be an integer year, got {value!r}")
