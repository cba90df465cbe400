"""
Tests for report assembly.

Covers:
- Expense share formatting, including the zero-total marker
- Category breakdown order and labels
- Budget-vs-actual content limited to quarters with actuals
- Signature block and metadata from configuration
- JSON-ready serialization
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from healx_kernel.domain.records import RawSourceBundle
from healx_kernel.exceptions import UnsupportedReportFormatError
from healx_modules.budget.models import PlanFormInput
from healx_modules.reporting.config import ReportingConfig
from healx_modules.reporting.models import ReportFormat
from healx_modules.reporting.statements import (
    INSUFFICIENT_DATA,
    build_report,
    category_breakdown,
    format_share,
    render_to_dict,
    snapshot_lines,
)

GENERATED_AT = datetime(2025, 5, 15, 12, 0, tzinfo=timezone.utc)


class TestFormatShare:
    """Tests for format_share."""

    def test_one_decimal(self):
        assert format_share(Decimal("1"), Decimal("3")) == "33.3%"

    def test_half_up(self):
        assert format_share(Decimal("1"), Decimal("8")) == "12.5%"
        assert format_share(Decimal("0.0625"), Decimal("1")) == "6.3%"

    def test_zero_total(self):
        assert format_share(Decimal("0"), Decimal("0")) == INSUFFICIENT_DATA


class TestBreakdown:
    """Tests for the expense category breakdown."""

    def test_categories_and_shares(self, sample_snapshot):
        rows = category_breakdown(sample_snapshot)

        assert [r.category for r in rows] == ["payroll", "inventory", "utilities", "suppliers"]
        assert rows[0].label == "Payroll Expenses"
        # 177500 / 190502 = 93.17%
        assert rows[0].share == "93.2%"
        assert rows[2].share == "1.0%"

    def test_zero_expenses_marker(self, snapshot_factory):
        rows = category_breakdown(snapshot_factory(RawSourceBundle()))
        assert {r.share for r in rows} == {INSUFFICIENT_DATA}

    def test_snapshot_lines(self, sample_snapshot):
        lines = snapshot_lines(sample_snapshot)
        assert lines[0].label == "Total Revenue"
        assert lines[-1].key == "net_income"
        assert lines[-1].amount == sample_snapshot.net_income


class TestBuildReport:
    """Tests for build_report."""

    def test_with_plan(self, plan_store, sample_snapshot):
        plan = plan_store.create(
            PlanFormInput(name="FY", start_year="2025", end_year="2026"), sample_snapshot, seed=2,
        )
        report = build_report(sample_snapshot, plan, ReportingConfig(), GENERATED_AT)

        assert report.plan.name == "FY"
        assert report.plan.period == "2025 - 2026"
        assert [c.period for c in report.comparisons] == ["Q1 2025", "Q2 2025"]
        assert [q.period for q in report.category_variances] == ["Q1 2025", "Q2 2025"]
        assert len(report.category_variances[0].rows) == 5
        assert report.variance_summary.quarters_compared == 2
        assert len(report.monthly_trend) == 12

    def test_future_plan_has_no_comparisons(self, plan_store, sample_snapshot):
        plan = plan_store.create(
            PlanFormInput(name="Later", start_year="2030", end_year="2031"), sample_snapshot, seed=2,
        )
        report = build_report(sample_snapshot, plan, ReportingConfig(), GENERATED_AT)
        assert report.comparisons == ()
        assert report.category_variances == ()

    def test_without_plan(self, sample_snapshot):
        report = build_report(sample_snapshot, None, ReportingConfig(), GENERATED_AT)
        assert report.plan is None
        assert report.comparisons == ()
        assert report.variance_summary is None

    def test_signature_and_metadata(self, sample_snapshot):
        config = ReportingConfig(entity_name="Clinic", signatory_title="CFO")
        report = build_report(sample_snapshot, None, config, GENERATED_AT)

        assert report.metadata.entity_name == "Clinic"
        assert report.metadata.currency == "LKR"
        assert report.metadata.generated_at == GENERATED_AT
        assert report.signature.signatory_title == "CFO"
        assert report.signature.seal_lines == ("HEAL-X OFFICIAL SEAL", "HEALTHCARE MANAGEMENT SYSTEM")
        assert "illustrative" in report.metadata.trend_note


class TestRenderToDict:
    """Tests for render_to_dict."""

    def test_report_serializable(self, sample_snapshot):
        payload = render_to_dict(build_report(sample_snapshot, None, ReportingConfig(), GENERATED_AT))

        assert payload["snapshot"]["total_revenue"] == "20500"
        assert payload["metadata"]["generated_at"] == GENERATED_AT.isoformat()
        assert payload["plan"] is None
        assert len(payload["monthly_trend"]) == 12

    def test_enum_value(self):
        assert render_to_dict(ReportFormat.RAW) == "raw"

    def test_read_only_mappings(self, sample_snapshot):
        payload = render_to_dict(sample_snapshot)

        assert isinstance(payload["revenue_by_rule"], dict)
        assert payload["revenue_by_rule"] == {
            rule: str(amount) for rule, amount in sample_snapshot.revenue_by_rule.items()
        }


class TestReportFormat:
    """Tests for ReportFormat.parse."""

    @pytest.mark.parametrize(
        "name, fmt",
        [
            ("html", ReportFormat.STRUCTURED_DOCUMENT),
            ("structured_document", ReportFormat.STRUCTURED_DOCUMENT),
            ("XLSX", ReportFormat.TABULAR),
            ("tabular", ReportFormat.TABULAR),
            ("json", ReportFormat.RAW),
            (ReportFormat.RAW, ReportFormat.RAW),
        ],
    )
    def test_aliases(self, name, fmt):
        assert ReportFormat.parse(name) is fmt

    @pytest.mark.parametrize("name", ["pdf", "", "csv"])
    def test_unsupported(self, name):
        with pytest.raises(UnsupportedReportFormatError):
            ReportFormat.parse(name)
