"""
Format renderers for ``FinancialReport``.

* Structured document -- print-ready HTML from a Jinja2 template, ending
  with the authorization/signature block.
* Tabular -- XLSX workbook (openpyxl) with one sheet per report section.
* Raw -- JSON of the whole report view model.

Every renderer takes the same ``FinancialReport`` and returns bytes.
"""

from __future__ import annotations

import json
from io import BytesIO
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from openpyxl import Workbook
from openpyxl.styles import Font

from healx_modules.reporting.models import FinancialReport
from healx_modules.reporting.statements import format_amount, render_to_dict

TEMPLATE_DIR = Path(__file__).parent / "templates"
HTML_TEMPLATE = "financial_report.html.j2"

HTML_MEDIA_TYPE = "text/html; charset=utf-8"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
JSON_MEDIA_TYPE = "application/json"

_BOLD = Font(bold=True)


def _build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "j2"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["money"] = format_amount
    return env


_environment = _build_environment()


def render_html(report: FinancialReport) -> bytes:
    template = _environment.get_template(HTML_TEMPLATE)
    return template.render(report=report).encode("utf-8")


def render_json(report: FinancialReport) -> bytes:
    payload = render_to_dict(report)
    snapshot = report.snapshot
    payload["derived"] = {
        "profit_margin": render_to_dict(snapshot.profit_margin),
        "expense_ratio": render_to_dict(snapshot.expense_ratio),
    }
    return json.dumps(payload, indent=2, sort_keys=False).encode("utf-8")


def render_xlsx(report: FinancialReport) -> bytes:
    workbook = Workbook()
    meta = report.metadata

    summary = workbook.active
    summary.title = "Summary"
    _header(summary, [meta.entity_name, meta.title])
    summary.append(["Generated", meta.generated_at.isoformat()])
    summary.append(["Currency", meta.currency])
    summary.append([])
    if report.plan is not None:
        plan = report.plan
        summary.append(["Plan ID", str(plan.id)])
        summary.append(["Plan Name", plan.name])
        summary.append(["Plan Type", plan.plan_type])
        summary.append(["Status", plan.status])
        summary.append(["Planning Period", plan.period])
    else:
        summary.append(["Plan", "No budget plan selected"])
    summary.append([])
    _header(summary, ["Figure", f"Amount ({meta.currency})"])
    for line in report.snapshot_lines:
        summary.append([line.label, line.amount])

    breakdown = workbook.create_sheet("Breakdown")
    _header(breakdown, ["Category", f"Amount ({meta.currency})", "Share of Total Expenses"])
    for row in report.category_breakdown:
        breakdown.append([row.label, row.amount, row.share])

    trend = workbook.create_sheet("Trend")
    trend.append([meta.trend_note])
    _header(trend, ["Month", "Revenue", "Expenses", "Net Income"])
    for point in report.monthly_trend:
        trend.append([point.label, point.revenue, point.expenses, point.net_income])

    comparison = workbook.create_sheet("Budget vs Actual")
    _header(comparison, [
        "Period", "Budgeted Revenue", "Actual Revenue",
        "Budgeted Expenses", "Actual Expenses", "Variance",
    ])
    for c in report.comparisons:
        comparison.append([
            c.period, c.budgeted_revenue, c.actual_revenue,
            c.budgeted_expenses, c.actual_expenses, c.variance,
        ])
    if report.category_variances:
        comparison.append([])
        _header(comparison, ["Period", "Category", "Budgeted", "Actual", "Delta", "Delta %"])
        for quarter in report.category_variances:
            for v in quarter.rows:
                comparison.append([quarter.period, v.category, v.budgeted, v.actual, v.delta, v.pct])

    output = BytesIO()
    workbook.save(output)
    return output.getvalue()


def _header(sheet, values: list) -> None:
    sheet.append(values)
    for cell in sheet[sheet.max_row]:
        cell.font = _BOLD
