"""
Heal-x calculation engines.

Pure reductions from raw operational records to a financial snapshot, and
budget-vs-actual variance over plan quarters.  No I/O; time and randomness
are injected.
"""

from healx_engines.expense import (
    ExpenseCalculator,
    ExpenseResult,
    InventoryValuation,
    PayrollRates,
    PayrollSummary,
)
from healx_engines.fee_schedule import DEFAULT_FEE, FeeRule, FeeSchedule
from healx_engines.revenue import RevenueCalculator, RevenueResult
from healx_engines.snapshot import (
    EXPENSE_CATEGORIES,
    REVENUE_CATEGORY,
    FinancialSnapshot,
    MonthlyTrendPoint,
    SnapshotBuilder,
    TrendConfig,
)
from healx_engines.variance import (
    CategoryVariance,
    PlanVarianceSummary,
    QuarterComparison,
    VarianceAnalyzer,
)

__all__ = [
    "CategoryVariance",
    "DEFAULT_FEE",
    "EXPENSE_CATEGORIES",
    "ExpenseCalculator",
    "ExpenseResult",
    "FeeRule",
    "FeeSchedule",
    "FinancialSnapshot",
    "InventoryValuation",
    "MonthlyTrendPoint",
    "PayrollRates",
    "PayrollSummary",
    "PlanVarianceSummary",
    "QuarterComparison",
    "REVENUE_CATEGORY",
    "RevenueCalculator",
    "RevenueResult",
    "SnapshotBuilder",
    "TrendConfig",
    "VarianceAnalyzer",
]
