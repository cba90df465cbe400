"""
Budget Planning Domain Models (``healx_modules.budget.models``).

Responsibility
--------------
Frozen dataclass value objects for budget planning: plans, their quarter
grid of budgeted and actual figures, multi-year projections, and the raw
plan form submitted by a user.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Produced by
``QuarterPlanner`` and ``BudgetPlanStore``; consumed by the variance
engine and the report renderer.

Invariants enforced
-------------------
* All models are ``frozen=True``, their amount mappings read-only.  A plan
  is a point-in-time capture and never changes when later snapshots arrive.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``Quarter.quarter_index`` is in 1..4.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from healx_kernel.domain.values import ZERO, frozen_amounts


class PlanType(str, Enum):
    """Planning horizon of a budget plan."""
    OPERATIONAL = "operational"
    ROLLING = "rolling"
    STRATEGIC = "strategic"


class PlanStatus(str, Enum):
    """Budget plan states."""
    ACTIVE = "active"
    DRAFT = "draft"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class QuarterFigures:
    """Revenue and expense amounts of one quarter, keyed by budget category."""
    revenue: Mapping[str, Decimal] = field(default_factory=dict)
    expenses: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "revenue", frozen_amounts(self.revenue))
        object.__setattr__(self, "expenses", frozen_amounts(self.expenses))

    @property
    def total_revenue(self) -> Decimal:
        return sum(self.revenue.values(), ZERO)

    @property
    def total_expenses(self) -> Decimal:
        return sum(self.expenses.values(), ZERO)

    @property
    def net(self) -> Decimal:
        return self.total_revenue - self.total_expenses


@dataclass(frozen=True)
class Quarter:
    """One (year, quarter) cell of a plan."""
    year: int
    quarter_index: int
    budget: QuarterFigures
    actual: QuarterFigures | None = None

    def __post_init__(self) -> None:
        if self.quarter_index not in (1, 2, 3, 4):
            raise ValueError(f"quarter_index must be 1..4, got {self.quarter_index}")

    @property
    def period(self) -> str:
        return f"Q{self.quarter_index} {self.year}"

    @property
    def has_actual(self) -> bool:
        return self.actual is not None


@dataclass(frozen=True)
class ProjectionQuarter:
    """Projected figures of one quarter of a projection year."""
    quarter_index: int
    projected_revenue: Decimal
    projected_expenses: Decimal
    expense_split: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "expense_split", frozen_amounts(self.expense_split))


@dataclass(frozen=True)
class ProjectionYear:
    """Growth-and-seasonality projection for one plan year."""
    year: int
    year_offset: int
    quarters: tuple[ProjectionQuarter, ...] = ()

    @property
    def total_revenue(self) -> Decimal:
        return sum((q.projected_revenue for q in self.quarters), ZERO)

    @property
    def total_expenses(self) -> Decimal:
        return sum((q.projected_expenses for q in self.quarters), ZERO)


@dataclass(frozen=True)
class BudgetPlan:
    """A multi-year quarterly budget plan."""
    id: UUID
    name: str
    start_year: int
    end_year: int
    plan_type: PlanType
    status: PlanStatus = PlanStatus.ACTIVE
    quarters: tuple[Quarter, ...] = ()
    description: str = ""
    created_at: datetime | None = None
    projections: tuple[ProjectionYear, ...] = ()
    jitter_seed: int | None = None

    @property
    def period_label(self) -> str:
        return f"{self.start_year} - {self.end_year}"

    def quarter(self, year: int, quarter_index: int) -> Quarter | None:
        for q in self.quarters:
            if q.year == year and q.quarter_index == quarter_index:
                return q
        return None


@dataclass(frozen=True)
class PlanFormInput:
    """
    Plan creation form as submitted.

    Fields are untyped on purpose: the store validates them before any
    quarter is generated.
    """
    name: Any
    start_year: Any
    end_year: Any
    plan_type: Any = PlanType.OPERATIONAL.value
    description: Any = ""
