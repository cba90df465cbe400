"""
Pure report assembly functions.

These functions turn a snapshot and a budget plan into the
``FinancialReport`` view model shared by every output format.  ZERO I/O.
ZERO side effects.  The generation time is passed in by the caller.

All monetary values stay Decimal until a renderer formats them.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from uuid import UUID

from healx_engines.snapshot import FinancialSnapshot
from healx_engines.variance import VarianceAnalyzer
from healx_kernel.domain.values import ZERO
from healx_modules.budget.models import BudgetPlan
from healx_modules.reporting.config import ReportingConfig
from healx_modules.reporting.models import (
    CategoryShare,
    FinancialReport,
    PlanSection,
    QuarterCategoryVariances,
    ReportMetadata,
    SignatureBlock,
    SnapshotLine,
)

INSUFFICIENT_DATA = "insufficient data"

SNAPSHOT_FIELDS: tuple[tuple[str, str], ...] = (
    ("total_revenue", "Total Revenue"),
    ("total_payroll_expenses", "Payroll Expenses"),
    ("current_stock_value", "Current Stock Value"),
    ("total_auto_restock_value", "Auto-Restock Spending"),
    ("total_inventory_value", "Total Inventory Value"),
    ("total_utility_expenses", "Utility Expenses"),
    ("total_supplier_expenses", "Supplier Expenses"),
    ("total_expenses", "Total Expenses"),
    ("net_income", "Net Income"),
)

CATEGORY_LABELS: dict[str, str] = {
    "consultations": "Consultation Revenue",
    "payroll": "Payroll Expenses",
    "inventory": "Inventory Expenses",
    "utilities": "Utility Expenses",
    "suppliers": "Supplier Expenses",
}

_ONE_DECIMAL = Decimal("0.1")


# =========================================================================
# Helpers
# =========================================================================


def format_share(amount: Decimal, total: Decimal) -> str:
    """
    Share of ``amount`` in ``total`` as ``"N.N%"``.

    A zero total has no meaningful share; the explicit
    ``INSUFFICIENT_DATA`` marker is returned instead of 0% or NaN.
    """
    if total == ZERO:
        return INSUFFICIENT_DATA
    pct = (amount / total * 100).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)
    return f"{pct}%"


def format_amount(amount: Decimal) -> str:
    """Thousands-separated amount with two decimals."""
    return f"{amount:,.2f}"


def snapshot_lines(snapshot: FinancialSnapshot) -> tuple[SnapshotLine, ...]:
    return tuple(
        SnapshotLine(key=key, label=label, amount=getattr(snapshot, key))
        for key, label in SNAPSHOT_FIELDS
    )


def category_breakdown(snapshot: FinancialSnapshot) -> tuple[CategoryShare, ...]:
    total = snapshot.total_expenses
    return tuple(
        CategoryShare(
            category=category,
            label=CATEGORY_LABELS[category],
            amount=amount,
            share=format_share(amount, total),
        )
        for category, amount in snapshot.expense_categories().items()
    )


def plan_section(plan: BudgetPlan) -> PlanSection:
    return PlanSection(
        id=plan.id,
        name=plan.name,
        plan_type=plan.plan_type.value,
        status=plan.status.value,
        period=plan.period_label,
        description=plan.description,
    )


def signature_block(config: ReportingConfig) -> SignatureBlock:
    return SignatureBlock(
        signatory_title=config.signatory_title,
        organization=config.organization,
        date_line=config.date_line,
        approval_label=config.approval_label,
        seal_lines=tuple(config.seal_lines),
        footer=config.footer,
    )


# =========================================================================
# Assembly
# =========================================================================


def build_report(
    snapshot: FinancialSnapshot,
    plan: BudgetPlan | None,
    config: ReportingConfig,
    generated_at: datetime,
    analyzer: VarianceAnalyzer | None = None,
) -> FinancialReport:
    """
    Assemble the report view model.

    Budget-vs-actual content covers only quarters with actuals; a report
    without a plan carries no comparisons.
    """
    analyzer = analyzer or VarianceAnalyzer()

    comparisons: tuple = ()
    category_rows: tuple = ()
    summary = None
    if plan is not None:
        comparisons = tuple(analyzer.compare_plan(plan))
        category_rows = tuple(
            QuarterCategoryVariances(period=q.period, rows=tuple(analyzer.category_variances(q)))
            for q in plan.quarters
            if q.actual is not None
        )
        summary = analyzer.summarize(plan)

    return FinancialReport(
        metadata=ReportMetadata(
            entity_name=config.entity_name,
            currency=config.currency,
            title=config.report_title,
            generated_at=generated_at,
            trend_note=config.trend_note,
        ),
        plan=plan_section(plan) if plan is not None else None,
        snapshot=snapshot,
        snapshot_lines=snapshot_lines(snapshot),
        category_breakdown=category_breakdown(snapshot),
        monthly_trend=snapshot.monthly_trend,
        comparisons=comparisons,
        category_variances=category_rows,
        variance_summary=summary,
        signature=signature_block(config),
    )


# =========================================================================
# Serialization
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to a plain dict for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - UUID -> str
    - datetime/date -> ISO format string
    - Enum -> .value
    - Mappings (including read-only ones) -> dicts
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, Mapping):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
