"""
Budget Planning Module.

Multi-year quarterly budget plans materialized from a financial snapshot:
budgeted figures per category with seeded jitter, actuals for elapsed
quarters of the current year, and growth/seasonality projections.
"""

from healx_modules.budget.config import BudgetConfig
from healx_modules.budget.models import (
    BudgetPlan,
    PlanFormInput,
    PlanStatus,
    PlanType,
    ProjectionQuarter,
    ProjectionYear,
    Quarter,
    QuarterFigures,
)
from healx_modules.budget.planner import QuarterPlanner
from healx_modules.budget.repository import (
    BudgetPlanRepository,
    InMemoryBudgetPlanRepository,
    SqlBudgetPlanRepository,
)
from healx_modules.budget.service import BudgetPlanStore

__all__ = [
    "BudgetConfig",
    "BudgetPlan",
    "BudgetPlanRepository",
    "BudgetPlanStore",
    "InMemoryBudgetPlanRepository",
    "PlanFormInput",
    "PlanStatus",
    "PlanType",
    "ProjectionQuarter",
    "ProjectionYear",
    "Quarter",
    "QuarterFigures",
    "QuarterPlanner",
    "SqlBudgetPlanRepository",
]
