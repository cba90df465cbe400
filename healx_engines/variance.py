"""
healx_engines.variance -- Budget vs. actual comparison of plan quarters.

Responsibility:
    Compare the budgeted figures of a quarter with its actual figures,
    both at quarter level (net variance) and per budget category.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Works on any object
    shaped like a plan quarter (``year``, ``quarter_index``, ``budget``,
    ``actual``) so it does not depend on the budget module.

Invariants enforced:
    - A quarter without actuals yields no comparison; it is never shown
      as a zero-actual quarter.
    - ``variance = (actual_revenue - actual_expenses)
      - (budgeted_revenue - budgeted_expenses)``.
    - Category ``pct = delta / budgeted * 100`` quantized to 0.01, and 0
      when ``budgeted <= 0``.

Usage:
    from healx_engines.variance import VarianceAnalyzer

    analyzer = VarianceAnalyzer()
    rows = analyzer.compare_plan(plan)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from healx_engines.tracer import traced_engine
from healx_kernel.domain.values import CENT, ZERO, round_half_up
from healx_kernel.logging_config import get_logger

logger = get_logger("engines.variance")


class FiguresLike(Protocol):
    revenue: Mapping[str, Decimal]
    expenses: Mapping[str, Decimal]


class QuarterLike(Protocol):
    year: int
    quarter_index: int
    budget: FiguresLike
    actual: FiguresLike | None


class PlanLike(Protocol):
    quarters: Sequence[QuarterLike]


def period_label(year: int, quarter_index: int) -> str:
    return f"Q{quarter_index} {year}"


def _sum(values: Mapping[str, Decimal]) -> Decimal:
    return sum(values.values(), ZERO)


@dataclass(frozen=True)
class QuarterComparison:
    period: str
    year: int
    quarter_index: int
    budgeted_revenue: Decimal
    actual_revenue: Decimal
    budgeted_expenses: Decimal
    actual_expenses: Decimal
    variance: Decimal

    @property
    def budgeted_net(self) -> Decimal:
        return self.budgeted_revenue - self.budgeted_expenses

    @property
    def actual_net(self) -> Decimal:
        return self.actual_revenue - self.actual_expenses

    @property
    def is_favorable(self) -> bool:
        return self.variance >= ZERO


@dataclass(frozen=True)
class CategoryVariance:
    category: str
    kind: str  # "revenue" or "expense"
    budgeted: Decimal
    actual: Decimal
    delta: Decimal
    pct: Decimal

    @property
    def is_favorable(self) -> bool:
        if self.kind == "revenue":
            return self.delta >= ZERO
        return self.delta <= ZERO


@dataclass(frozen=True)
class PlanVarianceSummary:
    quarters_compared: int
    budgeted_revenue: Decimal = ZERO
    actual_revenue: Decimal = ZERO
    budgeted_expenses: Decimal = ZERO
    actual_expenses: Decimal = ZERO
    total_variance: Decimal = ZERO


class VarianceAnalyzer:
    """
    Pure budget-vs-actual calculator.

    Contract:
        No I/O, no clock access; identical quarters give identical results.
    """

    def compare(self, quarter: QuarterLike) -> QuarterComparison | None:
        if quarter.actual is None:
            return None

        budgeted_revenue = _sum(quarter.budget.revenue)
        budgeted_expenses = _sum(quarter.budget.expenses)
        actual_revenue = _sum(quarter.actual.revenue)
        actual_expenses = _sum(quarter.actual.expenses)

        return QuarterComparison(
            period=period_label(quarter.year, quarter.quarter_index),
            year=quarter.year,
            quarter_index=quarter.quarter_index,
            budgeted_revenue=budgeted_revenue,
            actual_revenue=actual_revenue,
            budgeted_expenses=budgeted_expenses,
            actual_expenses=actual_expenses,
            variance=(actual_revenue - actual_expenses) - (budgeted_revenue - budgeted_expenses),
        )

    @traced_engine("variance", "1.0", fingerprint_fields=("plan",))
    def compare_plan(self, plan: PlanLike) -> list[QuarterComparison]:
        comparisons = [c for c in (self.compare(q) for q in plan.quarters) if c is not None]
        logger.debug(
            "plan_compared",
            extra={"quarters": len(plan.quarters), "compared": len(comparisons)},
        )
        return comparisons

    def category_variances(self, quarter: QuarterLike) -> list[CategoryVariance]:
        """Per-category deltas; empty when the quarter has no actuals."""
        if quarter.actual is None:
            return []

        rows: list[CategoryVariance] = []
        for kind, budgeted_map, actual_map in (
            ("revenue", quarter.budget.revenue, quarter.actual.revenue),
            ("expense", quarter.budget.expenses, quarter.actual.expenses),
        ):
            for category, budgeted in budgeted_map.items():
                actual = actual_map.get(category, ZERO)
                delta = actual - budgeted
                if budgeted > ZERO:
                    pct = round_half_up(delta / budgeted * 100, CENT)
                else:
                    pct = round_half_up(ZERO, CENT)
                rows.append(
                    CategoryVariance(
                        category=category,
                        kind=kind,
                        budgeted=budgeted,
                        actual=actual,
                        delta=delta,
                        pct=pct,
                    )
                )
        return rows

    def summarize(self, plan: PlanLike) -> PlanVarianceSummary:
        """Plan-level totals over the quarters that have actuals."""
        comparisons = self.compare_plan(plan)
        return PlanVarianceSummary(
            quarters_compared=len(comparisons),
            budgeted_revenue=sum((c.budgeted_revenue for c in comparisons), ZERO),
            actual_revenue=sum((c.actual_revenue for c in comparisons), ZERO),
            budgeted_expenses=sum((c.budgeted_expenses for c in comparisons), ZERO),
            actual_expenses=sum((c.actual_expenses for c in comparisons), ZERO),
            total_variance=sum((c.variance for c in comparisons), ZERO),
        )
