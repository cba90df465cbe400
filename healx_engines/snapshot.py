"""
healx_engines.snapshot -- The consistent financial snapshot of one refresh.

Responsibility:
    Combine a ``RevenueResult`` and an ``ExpenseResult`` into a frozen
    ``FinancialSnapshot`` and attach a twelve-month illustrative trend.

    The trend spreads the annual totals evenly across the twelve months
    ending with the clock's current month and perturbs each month with a
    seeded jitter factor.  It is synthesized, not observed, and every
    snapshot flags it as illustrative.

Architecture position:
    Engines -- pure calculation layer.  Time comes from an injected
    ``Clock``; randomness from a seeded ``JitterSource``.

Invariants enforced (checked in ``FinancialSnapshot.__post_init__``):
    - ``total_inventory_value == current_stock_value + total_auto_restock_value``
    - ``total_expenses == payroll + utilities + inventory + suppliers``
    - ``net_income == total_revenue - total_expenses``
    - ``len(monthly_trend) == 12`` and each point's
      ``net_income == revenue - expenses``.

Failure modes:
    - ``SnapshotInvariantError`` when a derived total does not reconcile.
      This signals a calculation bug; bad source data never triggers it.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from healx_engines.expense import ExpenseResult
from healx_engines.revenue import RevenueResult
from healx_engines.tracer import traced_engine
from healx_kernel.domain.clock import Clock, SystemClock
from healx_kernel.domain.jitter import JitterBounds, JitterSource
from healx_kernel.domain.records import SourceKind
from healx_kernel.domain.values import ZERO, frozen_amounts, round_half_up
from healx_kernel.exceptions import SnapshotInvariantError
from healx_kernel.logging_config import get_logger

logger = get_logger("engines.snapshot")

TREND_MONTHS = 12

REVENUE_CATEGORY = "consultations"
EXPENSE_CATEGORIES: tuple[str, ...] = ("payroll", "inventory", "utilities", "suppliers")


@dataclass(frozen=True)
class TrendConfig:
    """Jitter bounds of the illustrative monthly trend."""

    revenue: JitterBounds = JitterBounds.of("0.8", "1.2")
    expenses: JitterBounds = JitterBounds.of("0.9", "1.1")


@dataclass(frozen=True)
class MonthlyTrendPoint:
    month: str
    year: int
    revenue: Decimal
    expenses: Decimal
    net_income: Decimal

    @property
    def label(self) -> str:
        return f"{self.month} {self.year}"


@dataclass(frozen=True)
class FinancialSnapshot:
    """Immutable aggregate of one refresh.  Never cached or patched."""

    total_revenue: Decimal
    total_payroll_expenses: Decimal
    current_stock_value: Decimal
    total_auto_restock_value: Decimal
    total_inventory_value: Decimal
    total_utility_expenses: Decimal
    total_supplier_expenses: Decimal
    total_expenses: Decimal
    net_income: Decimal
    monthly_trend: tuple[MonthlyTrendPoint, ...] = ()
    generated_at: datetime | None = None
    accepted_appointments: int = 0
    revenue_by_rule: Mapping[str, Decimal] = field(default_factory=dict)
    unavailable_sources: tuple[SourceKind, ...] = ()
    trend_seed: int | None = None
    illustrative_trend: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "revenue_by_rule", frozen_amounts(self.revenue_by_rule))
        _check(
            "inventory_total",
            self.current_stock_value + self.total_auto_restock_value,
            self.total_inventory_value,
        )
        _check(
            "expense_total",
            self.total_payroll_expenses
            + self.total_utility_expenses
            + self.total_inventory_value
            + self.total_supplier_expenses,
            self.total_expenses,
        )
        _check("net_income", self.total_revenue - self.total_expenses, self.net_income)
        if self.monthly_trend and len(self.monthly_trend) != TREND_MONTHS:
            raise SnapshotInvariantError(
                "trend_length", str(TREND_MONTHS), str(len(self.monthly_trend)),
            )
        for point in self.monthly_trend:
            _check(f"trend_net_income[{point.label}]", point.revenue - point.expenses, point.net_income)

    @property
    def profit_margin(self) -> Decimal | None:
        """Net income as a percentage of revenue; None without revenue."""
        if self.total_revenue == ZERO:
            return None
        return self.net_income / self.total_revenue * 100

    @property
    def expense_ratio(self) -> Decimal | None:
        """Expenses as a percentage of revenue; None without revenue."""
        if self.total_revenue == ZERO:
            return None
        return self.total_expenses / self.total_revenue * 100

    def expense_categories(self) -> dict[str, Decimal]:
        """Expense amounts keyed by budget category, in display order."""
        return {
            "payroll": self.total_payroll_expenses,
            "inventory": self.total_inventory_value,
            "utilities": self.total_utility_expenses,
            "suppliers": self.total_supplier_expenses,
        }

    def category_totals(self) -> dict[str, Decimal]:
        """Revenue and expense totals keyed by budget category."""
        return {REVENUE_CATEGORY: self.total_revenue, **self.expense_categories()}


def _check(invariant: str, expected: Decimal, actual: Decimal) -> None:
    if expected != actual:
        raise SnapshotInvariantError(invariant, str(expected), str(actual))


def trailing_months(year: int, month: int, count: int = TREND_MONTHS) -> list[tuple[int, int]]:
    """``(year, month)`` pairs for the ``count`` months ending at year/month."""
    end = year * 12 + (month - 1)
    return [divmod(index, 12) for index in range(end - count + 1, end + 1)]


class SnapshotBuilder:
    """Builds snapshots from engine results."""

    def __init__(self, clock: Clock | None = None, trend: TrendConfig | None = None):
        self.clock = clock or SystemClock()
        self.trend = trend or TrendConfig()

    @traced_engine("snapshot", "1.0", fingerprint_fields=("revenue", "expenses", "seed"))
    def build(
        self,
        revenue: RevenueResult,
        expenses: ExpenseResult,
        *,
        seed: int | None = None,
        unavailable: Iterable[SourceKind] = (),
    ) -> FinancialSnapshot:
        """
        Combine engine results into a snapshot.

        Args:
            revenue: Output of ``RevenueCalculator.compute_revenue``.
            expenses: Output of ``ExpenseCalculator.compute_expenses``.
            seed: Trend jitter seed.  When omitted a seed is drawn and
                recorded on the snapshot as ``trend_seed``.
            unavailable: Sources that failed during the refresh.
        """
        jitter = JitterSource(seed)
        total_expenses = expenses.total
        net_income = revenue.total - total_expenses
        now = self.clock.now()

        snapshot = FinancialSnapshot(
            total_revenue=revenue.total,
            total_payroll_expenses=expenses.payroll.total,
            current_stock_value=expenses.inventory.current_stock_value,
            total_auto_restock_value=expenses.inventory.total_auto_restock_value,
            total_inventory_value=expenses.inventory.total_value,
            total_utility_expenses=expenses.utilities,
            total_supplier_expenses=expenses.suppliers,
            total_expenses=total_expenses,
            net_income=net_income,
            monthly_trend=self._build_trend(revenue.total, total_expenses, now, jitter),
            generated_at=now,
            accepted_appointments=revenue.count,
            revenue_by_rule=revenue.by_rule,
            unavailable_sources=tuple(unavailable),
            trend_seed=jitter.seed,
        )

        logger.info(
            "snapshot_built",
            extra={
                "total_revenue": str(snapshot.total_revenue),
                "total_expenses": str(snapshot.total_expenses),
                "net_income": str(snapshot.net_income),
                "unavailable_sources": [kind.value for kind in snapshot.unavailable_sources],
                "trend_seed": snapshot.trend_seed,
            },
        )
        return snapshot

    def _build_trend(
        self,
        total_revenue: Decimal,
        total_expenses: Decimal,
        now: datetime,
        jitter: JitterSource,
    ) -> tuple[MonthlyTrendPoint, ...]:
        monthly_revenue = total_revenue / TREND_MONTHS
        monthly_expenses = total_expenses / TREND_MONTHS
        points = []
        for year, month_index in trailing_months(now.year, now.month):
            month_revenue = round_half_up(monthly_revenue * jitter.factor(self.trend.revenue))
            month_expenses = round_half_up(monthly_expenses * jitter.factor(self.trend.expenses))
            points.append(
                MonthlyTrendPoint(
                    month=calendar.month_abbr[month_index + 1],
                    year=year,
                    revenue=month_revenue,
                    expenses=month_expenses,
                    net_income=month_revenue - month_expenses,
                )
            )
        return tuple(points)
