"""
Quarter planner (``healx_modules.budget.planner``).

Responsibility
--------------
Materialize the quarter grid and the multi-year projections of a new plan
from a snapshot.  Pure: time comes from the injected clock, randomness
from the ``JitterSource`` passed in.

* Budget: snapshot category total / 4 x a jitter factor drawn from that
  category's bounds, quantized to cents.
* Actual: only for quarters of the current year up to and including the
  current quarter; snapshot category total / 4 with no jitter.  Past and
  future years carry no actuals.
* Projection: per plan year ``y`` (offset from the start year) and
  quarter ``q``, ``base x (1 + growth)^y / 4 x seasonal[q]`` rounded to
  whole units, with projected expenses split by fixed category shares.
"""

from __future__ import annotations

from decimal import Decimal

from healx_engines.snapshot import FinancialSnapshot
from healx_kernel.domain.clock import Clock
from healx_kernel.domain.jitter import JitterSource
from healx_kernel.domain.values import quantize_money, round_half_up
from healx_modules.budget.config import EXPENSE_CATEGORIES, REVENUE_CATEGORIES, BudgetConfig
from healx_modules.budget.models import ProjectionQuarter, ProjectionYear, Quarter, QuarterFigures

QUARTERS_PER_YEAR = 4


class QuarterPlanner:
    """Builds the quarter grid and projections of a plan."""

    def __init__(self, config: BudgetConfig, clock: Clock):
        self.config = config
        self.clock = clock

    def build_quarters(
        self,
        start_year: int,
        end_year: int,
        snapshot: FinancialSnapshot,
        jitter: JitterSource,
    ) -> tuple[Quarter, ...]:
        totals = snapshot.category_totals()
        current_year, current_quarter = self.clock.current_quarter()
        quarters = []

        for year in range(start_year, end_year + 1):
            for quarter_index in range(1, QUARTERS_PER_YEAR + 1):
                budget = QuarterFigures(
                    revenue={c: self._budgeted(totals[c], c, jitter) for c in REVENUE_CATEGORIES},
                    expenses={c: self._budgeted(totals[c], c, jitter) for c in EXPENSE_CATEGORIES},
                )
                actual = None
                if year == current_year and quarter_index <= current_quarter:
                    actual = QuarterFigures(
                        revenue={c: _quarter_share(totals[c]) for c in REVENUE_CATEGORIES},
                        expenses={c: _quarter_share(totals[c]) for c in EXPENSE_CATEGORIES},
                    )
                quarters.append(Quarter(year, quarter_index, budget, actual))

        return tuple(quarters)

    def build_projections(
        self,
        start_year: int,
        end_year: int,
        snapshot: FinancialSnapshot,
    ) -> tuple[ProjectionYear, ...]:
        cfg = self.config
        years = []
        for offset in range(end_year - start_year + 1):
            revenue_growth = (1 + cfg.revenue_growth_rate) ** offset
            expense_growth = (1 + cfg.expense_growth_rate) ** offset
            quarters = []
            for quarter_index, seasonal in enumerate(cfg.seasonal_factors, start=1):
                revenue = snapshot.total_revenue * revenue_growth / QUARTERS_PER_YEAR * seasonal
                expenses = snapshot.total_expenses * expense_growth / QUARTERS_PER_YEAR * seasonal
                quarters.append(
                    ProjectionQuarter(
                        quarter_index=quarter_index,
                        projected_revenue=round_half_up(revenue),
                        projected_expenses=round_half_up(expenses),
                        expense_split={
                            name: round_half_up(expenses * share)
                            for name, share in cfg.projection_split.items()
                        },
                    )
                )
            years.append(ProjectionYear(start_year + offset, offset, tuple(quarters)))
        return tuple(years)

    def _budgeted(self, total: Decimal, category: str, jitter: JitterSource) -> Decimal:
        return quantize_money(total / QUARTERS_PER_YEAR * jitter.factor(self.config.jitter_for(category)))


def _quarter_share(total: Decimal) -> Decimal:
    return quantize_money(total / QUARTERS_PER_YEAR)
