"""
Reporting Domain Models (``healx_modules.reporting.models``).

Responsibility
--------------
Frozen dataclasses for the assembled financial report and the rendered
artifact.  ``FinancialReport`` is the single view model every format is
rendered from, so all formats carry the same content.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from healx_engines.snapshot import FinancialSnapshot, MonthlyTrendPoint
from healx_engines.variance import CategoryVariance, PlanVarianceSummary, QuarterComparison
from healx_kernel.exceptions import UnsupportedReportFormatError


class ReportFormat(str, Enum):
    """Output formats of the report renderer."""
    STRUCTURED_DOCUMENT = "structured_document"
    TABULAR = "tabular"
    RAW = "raw"

    @classmethod
    def parse(cls, name: str | ReportFormat) -> ReportFormat:
        """Resolve a format by value or file-type alias (html, xlsx, json)."""
        if isinstance(name, ReportFormat):
            return name
        key = str(name).strip().lower()
        resolved = _FORMAT_ALIASES.get(key)
        if resolved is None:
            raise UnsupportedReportFormatError(str(name))
        return resolved


_FORMAT_ALIASES: dict[str, ReportFormat] = {
    "structured_document": ReportFormat.STRUCTURED_DOCUMENT,
    "html": ReportFormat.STRUCTURED_DOCUMENT,
    "tabular": ReportFormat.TABULAR,
    "xlsx": ReportFormat.TABULAR,
    "raw": ReportFormat.RAW,
    "json": ReportFormat.RAW,
}


@dataclass(frozen=True)
class RenderedReport:
    """A rendered report ready to be written or sent."""
    content: bytes
    media_type: str
    extension: str
    fmt: ReportFormat


@dataclass(frozen=True)
class ReportMetadata:
    entity_name: str
    currency: str
    title: str
    generated_at: datetime
    trend_note: str


@dataclass(frozen=True)
class PlanSection:
    """Identity of the plan the report is about."""
    id: UUID
    name: str
    plan_type: str
    status: str
    period: str
    description: str = ""


@dataclass(frozen=True)
class SnapshotLine:
    """One labelled snapshot figure."""
    key: str
    label: str
    amount: Decimal


@dataclass(frozen=True)
class CategoryShare:
    """An expense category with its share of total expenses."""
    category: str
    label: str
    amount: Decimal
    share: str


@dataclass(frozen=True)
class QuarterCategoryVariances:
    period: str
    rows: tuple[CategoryVariance, ...] = ()


@dataclass(frozen=True)
class SignatureBlock:
    signatory_title: str
    organization: str
    date_line: str
    approval_label: str
    seal_lines: tuple[str, ...]
    footer: str


@dataclass(frozen=True)
class FinancialReport:
    """Everything a rendered report shows, in render order."""
    metadata: ReportMetadata
    plan: PlanSection | None
    snapshot: FinancialSnapshot
    snapshot_lines: tuple[SnapshotLine, ...]
    category_breakdown: tuple[CategoryShare, ...]
    monthly_trend: tuple[MonthlyTrendPoint, ...]
    comparisons: tuple[QuarterComparison, ...]
    category_variances: tuple[QuarterCategoryVariances, ...]
    variance_summary: PlanVarianceSummary | None
    signature: SignatureBlock
