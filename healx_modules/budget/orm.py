"""
SQLAlchemy ORM persistence models for budget plans.

Responsibility
--------------
Database-backed persistence for ``BudgetPlan``: a plan header row, one row
per (year, quarter) cell of the grid, and one row per projected quarter.
The category schema is fixed, so every category is its own column.

Architecture position
---------------------
**Modules layer** -- ORM models consumed by ``SqlBudgetPlanRepository``.
Inherits from ``TrackedBase`` (kernel db layer).

Invariants enforced
-------------------
* Monetary fields are ``Decimal`` columns (two places), never float.
* Enum fields stored as String(50).
* One quarter row per plan + year + quarter_index.
* ``sequence`` is unique and preserves creation order across restarts.
* ``status`` is "active" on at most one plan; the others are "draft".
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from healx_kernel.db.base import TrackedBase


# ---------------------------------------------------------------------------
# BudgetPlanModel (plan header)
# ---------------------------------------------------------------------------


class BudgetPlanModel(TrackedBase):
    """
    A multi-year budget plan.

    Maps to the ``BudgetPlan`` DTO in ``healx_modules.budget.models``.
    """

    __tablename__ = "budget_plans"

    __table_args__ = (
        UniqueConstraint("sequence", name="uq_budget_plan_sequence"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_year: Mapped[int]
    end_year: Mapped[int]
    plan_type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="draft")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    planned_at: Mapped[datetime | None] = mapped_column(nullable=True)
    jitter_seed: Mapped[int | None] = mapped_column(nullable=True)
    sequence: Mapped[int] = mapped_column(nullable=False)

    quarters: Mapped[list["BudgetQuarterModel"]] = relationship(
        "BudgetQuarterModel",
        back_populates="plan",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    projections: Mapped[list["BudgetProjectionModel"]] = relationship(
        "BudgetProjectionModel",
        back_populates="plan",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def to_dto(self):
        from healx_modules.budget.models import (
            BudgetPlan,
            PlanStatus,
            PlanType,
            ProjectionYear,
        )

        years: dict[int, list] = {}
        year_labels: dict[int, int] = {}
        for row in sorted(self.projections, key=lambda p: (p.year_offset, p.quarter_index)):
            years.setdefault(row.year_offset, []).append(row.to_dto())
            year_labels[row.year_offset] = row.year

        return BudgetPlan(
            id=self.id,
            name=self.name,
            start_year=self.start_year,
            end_year=self.end_year,
            plan_type=PlanType(self.plan_type),
            status=PlanStatus(self.status),
            quarters=tuple(
                q.to_dto()
                for q in sorted(self.quarters, key=lambda q: (q.year, q.quarter_index))
            ),
            description=self.description,
            created_at=self.planned_at,
            projections=tuple(
                ProjectionYear(year_labels[offset], offset, tuple(rows))
                for offset, rows in sorted(years.items())
            ),
            jitter_seed=self.jitter_seed,
        )

    @classmethod
    def from_dto(cls, dto, sequence: int) -> "BudgetPlanModel":
        model = cls(
            id=dto.id,
            name=dto.name,
            start_year=dto.start_year,
            end_year=dto.end_year,
            plan_type=dto.plan_type.value,
            status=dto.status.value,
            description=dto.description,
            planned_at=dto.created_at,
            jitter_seed=dto.jitter_seed,
            sequence=sequence,
        )
        model.quarters = [BudgetQuarterModel.from_dto(q) for q in dto.quarters]
        model.projections = [
            BudgetProjectionModel.from_dto(year, pq)
            for year in dto.projections
            for pq in year.quarters
        ]
        return model


# ---------------------------------------------------------------------------
# BudgetQuarterModel (one cell of the quarter grid)
# ---------------------------------------------------------------------------


class BudgetQuarterModel(TrackedBase):
    """
    Budgeted and (optional) actual figures of one plan quarter.

    ``has_actual`` distinguishes a quarter without actuals from one whose
    actuals are all zero.
    """

    __tablename__ = "budget_plan_quarters"

    __table_args__ = (
        UniqueConstraint("plan_id", "year", "quarter_index", name="uq_budget_quarter"),
    )

    plan_id: Mapped[UUID] = mapped_column(ForeignKey("budget_plans.id"), nullable=False)
    year: Mapped[int]
    quarter_index: Mapped[int]

    budget_consultations: Mapped[Decimal]
    budget_payroll: Mapped[Decimal]
    budget_inventory: Mapped[Decimal]
    budget_utilities: Mapped[Decimal]
    budget_suppliers: Mapped[Decimal]

    has_actual: Mapped[bool] = mapped_column(nullable=False, default=False)
    actual_consultations: Mapped[Decimal | None] = mapped_column(nullable=True)
    actual_payroll: Mapped[Decimal | None] = mapped_column(nullable=True)
    actual_inventory: Mapped[Decimal | None] = mapped_column(nullable=True)
    actual_utilities: Mapped[Decimal | None] = mapped_column(nullable=True)
    actual_suppliers: Mapped[Decimal | None] = mapped_column(nullable=True)

    plan: Mapped["BudgetPlanModel"] = relationship(
        "BudgetPlanModel",
        back_populates="quarters",
    )

    def to_dto(self):
        from healx_modules.budget.models import Quarter, QuarterFigures

        budget = QuarterFigures(
            revenue={"consultations": self.budget_consultations},
            expenses={
                "payroll": self.budget_payroll,
                "inventory": self.budget_inventory,
                "utilities": self.budget_utilities,
                "suppliers": self.budget_suppliers,
            },
        )
        actual = None
        if self.has_actual:
            actual = QuarterFigures(
                revenue={"consultations": self.actual_consultations},
                expenses={
                    "payroll": self.actual_payroll,
                    "inventory": self.actual_inventory,
                    "utilities": self.actual_utilities,
                    "suppliers": self.actual_suppliers,
                },
            )
        return Quarter(self.year, self.quarter_index, budget, actual)

    @classmethod
    def from_dto(cls, dto) -> "BudgetQuarterModel":
        actual = dto.actual
        return cls(
            year=dto.year,
            quarter_index=dto.quarter_index,
            budget_consultations=dto.budget.revenue["consultations"],
            budget_payroll=dto.budget.expenses["payroll"],
            budget_inventory=dto.budget.expenses["inventory"],
            budget_utilities=dto.budget.expenses["utilities"],
            budget_suppliers=dto.budget.expenses["suppliers"],
            has_actual=actual is not None,
            actual_consultations=actual.revenue["consultations"] if actual else None,
            actual_payroll=actual.expenses["payroll"] if actual else None,
            actual_inventory=actual.expenses["inventory"] if actual else None,
            actual_utilities=actual.expenses["utilities"] if actual else None,
            actual_suppliers=actual.expenses["suppliers"] if actual else None,
        )


# ---------------------------------------------------------------------------
# BudgetProjectionModel (one projected quarter)
# ---------------------------------------------------------------------------


class BudgetProjectionModel(TrackedBase):
    """Projected figures of one quarter of one plan year."""

    __tablename__ = "budget_plan_projections"

    __table_args__ = (
        UniqueConstraint("plan_id", "year_offset", "quarter_index", name="uq_budget_projection"),
    )

    plan_id: Mapped[UUID] = mapped_column(ForeignKey("budget_plans.id"), nullable=False)
    year: Mapped[int]
    year_offset: Mapped[int]
    quarter_index: Mapped[int]
    projected_revenue: Mapped[Decimal]
    projected_expenses: Mapped[Decimal]
    split_payroll: Mapped[Decimal]
    split_inventory: Mapped[Decimal]
    split_utilities: Mapped[Decimal]
    split_suppliers: Mapped[Decimal]

    plan: Mapped["BudgetPlanModel"] = relationship(
        "BudgetPlanModel",
        back_populates="projections",
    )

    def to_dto(self):
        from healx_modules.budget.models import ProjectionQuarter

        return ProjectionQuarter(
            quarter_index=self.quarter_index,
            projected_revenue=self.projected_revenue,
            projected_expenses=self.projected_expenses,
            expense_split={
                "payroll": self.split_payroll,
                "inventory": self.split_inventory,
                "utilities": self.split_utilities,
                "suppliers": self.split_suppliers,
            },
        )

    @classmethod
    def from_dto(cls, year, dto) -> "BudgetProjectionModel":
        return cls(
            year=year.year,
            year_offset=year.year_offset,
            quarter_index=dto.quarter_index,
            projected_revenue=dto.projected_revenue,
            projected_expenses=dto.projected_expenses,
            split_payroll=dto.expense_split["payroll"],
            split_inventory=dto.expense_split["inventory"],
            split_utilities=dto.expense_split["utilities"],
            split_suppliers=dto.expense_split["suppliers"],
        )
