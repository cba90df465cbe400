"""
healx_services.financial_service -- Refresh, plan, review and export facade.

Responsibility:
    Wires the source gateway, the calculation engines, the budget plan
    store and the report renderer into the four user-facing operations:

    * ``refresh``     -- fetch all sources and build a new snapshot.
    * ``create_plan`` -- materialize a budget plan from a snapshot.
    * ``review``      -- budget-vs-actual comparisons of a plan.
    * ``export``      -- render a snapshot and plan to a report file.

Architecture position:
    Services -- stateful orchestration over engines, ingestion and
    modules.  The only layer that builds repositories and gateways from
    configuration.

Invariants enforced:
    - Every refresh recomputes the snapshot from freshly fetched records;
      nothing is cached between refreshes.
    - Rendering a plan holds that plan's lock, so it never interleaves
      with a delete of the same plan.
"""

from __future__ import annotations

from pathlib import Path
from uuid import UUID, uuid4

import requests

from healx_config.schema import EngineConfig
from healx_engines.expense import ExpenseCalculator
from healx_engines.revenue import RevenueCalculator
from healx_engines.snapshot import FinancialSnapshot, SnapshotBuilder
from healx_engines.variance import CategoryVariance, QuarterComparison, VarianceAnalyzer
from healx_ingestion.gateway import SourceGateway
from healx_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from healx_kernel.domain.clock import Clock, SystemClock
from healx_kernel.domain.records import RawSourceBundle
from healx_kernel.exceptions import PlanNotFoundError
from healx_kernel.logging_config import LogContext, get_logger
from healx_modules.budget.models import BudgetPlan, PlanFormInput
from healx_modules.budget.repository import (
    BudgetPlanRepository,
    InMemoryBudgetPlanRepository,
    SqlBudgetPlanRepository,
)
from healx_modules.budget.service import BudgetPlanStore
from healx_modules.reporting.models import RenderedReport, ReportFormat
from healx_modules.reporting.service import ReportRenderer

logger = get_logger("services.financial")


class FinancialPlanningService:
    """Facade over the whole refresh -> snapshot -> plan/review/export flow."""

    def __init__(
        self,
        gateway: SourceGateway,
        store: BudgetPlanStore,
        renderer: ReportRenderer,
        config: EngineConfig | None = None,
        clock: Clock | None = None,
    ):
        self.config = config or EngineConfig.with_defaults()
        self.clock = clock or SystemClock()
        self.gateway = gateway
        self.store = store
        self.renderer = renderer
        self.revenue_calculator = RevenueCalculator()
        self.expense_calculator = ExpenseCalculator(self.config.payroll)
        self.snapshot_builder = SnapshotBuilder(self.clock, self.config.trend)
        self.analyzer = VarianceAnalyzer()

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        *,
        clock: Clock | None = None,
        repository: BudgetPlanRepository | None = None,
        session: requests.Session | None = None,
        persist: bool = True,
    ) -> FinancialPlanningService:
        """
        Build the service from configuration.

        With ``persist`` and no explicit repository, plans are stored in the
        configured database (tables are created on first use); otherwise
        they live in memory.
        """
        clock = clock or SystemClock()
        if repository is None:
            if persist:
                init_engine_from_url(config.database_url)
                create_tables()
                repository = SqlBudgetPlanRepository(get_session_factory())
            else:
                repository = InMemoryBudgetPlanRepository()

        return cls(
            gateway=SourceGateway.from_endpoints(config.sources, session=session),
            store=BudgetPlanStore(repository, config.budget, clock),
            renderer=ReportRenderer(config.reporting, clock),
            config=config,
            clock=clock,
        )

    # =========================================================================
    # Snapshot
    # =========================================================================

    def build_snapshot(self, bundle: RawSourceBundle, *, seed: int | None = None) -> FinancialSnapshot:
        revenue = self.revenue_calculator.compute_revenue(bundle.appointments)
        expenses = self.expense_calculator.compute_expenses(bundle)
        return self.snapshot_builder.build(
            revenue, expenses, seed=seed, unavailable=bundle.unavailable,
        )

    def refresh(self, *, seed: int | None = None, timeout: float | None = None) -> FinancialSnapshot:
        """Fetch every source and build a fresh snapshot."""
        correlation_id = str(uuid4())
        with LogContext.bind(correlation_id=correlation_id):
            effective_timeout = timeout if timeout is not None else self.config.refresh_timeout_seconds
            bundle = self.gateway.refresh(timeout=effective_timeout)
            snapshot = self.build_snapshot(bundle, seed=seed)
            if snapshot.unavailable_sources:
                logger.warning("snapshot_degraded", extra={
                    "unavailable_sources": [k.value for k in snapshot.unavailable_sources],
                })
        return snapshot

    # =========================================================================
    # Plans
    # =========================================================================

    def create_plan(
        self,
        form: PlanFormInput,
        snapshot: FinancialSnapshot | None = None,
        *,
        seed: int | None = None,
    ) -> BudgetPlan:
        snapshot = snapshot if snapshot is not None else self.refresh()
        return self.store.create(form, snapshot, seed=seed)

    def resolve_plan(self, plan_id: UUID | None = None) -> BudgetPlan:
        """The given plan, or the active plan when no id is given."""
        if plan_id is not None:
            return self.store.get(plan_id)
        plan = self.store.active_plan
        if plan is None:
            raise PlanNotFoundError("<active>")
        return plan

    def review(self, plan_id: UUID | None = None) -> list[QuarterComparison]:
        plan = self.resolve_plan(plan_id)
        return self.analyzer.compare_plan(plan)

    def review_categories(self, plan_id: UUID | None = None) -> dict[str, list[CategoryVariance]]:
        plan = self.resolve_plan(plan_id)
        return {
            q.period: self.analyzer.category_variances(q)
            for q in plan.quarters
            if q.actual is not None
        }

    # =========================================================================
    # Reports
    # =========================================================================

    def render(
        self,
        fmt: ReportFormat | str,
        *,
        snapshot: FinancialSnapshot | None = None,
        plan_id: UUID | None = None,
    ) -> RenderedReport:
        snapshot = snapshot if snapshot is not None else self.refresh()
        plan = self.resolve_plan(plan_id)
        with self.store.plan_lock(plan.id):
            return self.renderer.render(snapshot, plan, fmt)

    def export(
        self,
        fmt: ReportFormat | str,
        target_dir: Path | str,
        *,
        stem: str = "financial_report",
        snapshot: FinancialSnapshot | None = None,
        plan_id: UUID | None = None,
    ) -> Path:
        snapshot = snapshot if snapshot is not None else self.refresh()
        plan = self.resolve_plan(plan_id)
        with self.store.plan_lock(plan.id), LogContext.bind(plan_id=str(plan.id)):
            return self.renderer.export(snapshot, plan, fmt, target_dir, stem)
