"""
Reporting Module.

Renders a financial snapshot together with a budget plan into a
print-ready HTML document, an XLSX workbook or raw JSON.
"""

from healx_modules.reporting.config import ReportingConfig
from healx_modules.reporting.models import (
    CategoryShare,
    FinancialReport,
    RenderedReport,
    ReportFormat,
)
from healx_modules.reporting.service import ReportRenderer
from healx_modules.reporting.statements import (
    INSUFFICIENT_DATA,
    build_report,
    category_breakdown,
    format_share,
    render_to_dict,
)

__all__ = [
    "CategoryShare",
    "FinancialReport",
    "INSUFFICIENT_DATA",
    "RenderedReport",
    "ReportFormat",
    "ReportRenderer",
    "ReportingConfig",
    "build_report",
    "category_breakdown",
    "format_share",
    "render_to_dict",
]
