"""
Tests for the financial snapshot builder.

Covers:
- Totals and derived figures
- Invariant checks on construction
- Twelve-month illustrative trend ending at the clock's month
- Seeded reproducibility
- Ratios with and without revenue
- Read-only revenue breakdown
"""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from healx_engines.expense import ExpenseCalculator
from healx_engines.revenue import RevenueCalculator
from healx_engines.snapshot import (
    TREND_MONTHS,
    MonthlyTrendPoint,
    SnapshotBuilder,
    TrendConfig,
    trailing_months,
)
from healx_kernel.domain.clock import DeterministicClock
from healx_kernel.domain.jitter import JitterBounds
from healx_kernel.domain.records import RawSourceBundle, SourceKind
from healx_kernel.exceptions import SnapshotInvariantError


class TestSnapshotTotals:
    """Totals of a snapshot built from the sample bundle."""

    def test_figures(self, sample_snapshot):
        s = sample_snapshot
        assert s.total_revenue == Decimal("20500")
        assert s.total_payroll_expenses == Decimal("177500")
        assert s.current_stock_value == Decimal("2002.00")
        assert s.total_auto_restock_value == Decimal("1500")
        assert s.total_inventory_value == Decimal("3502.00")
        assert s.total_utility_expenses == Decimal("2000")
        assert s.total_supplier_expenses == Decimal("7500")
        assert s.total_expenses == Decimal("190502.00")
        assert s.net_income == Decimal("-170002.00")
        assert s.accepted_appointments == 4

    def test_category_totals(self, sample_snapshot):
        totals = sample_snapshot.category_totals()
        assert list(totals) == ["consultations", "payroll", "inventory", "utilities", "suppliers"]
        assert totals["inventory"] == sample_snapshot.total_inventory_value

    def test_ratios(self, sample_snapshot):
        assert sample_snapshot.expense_ratio > Decimal("100")
        assert sample_snapshot.profit_margin < Decimal("0")

    def test_ratios_without_revenue(self, snapshot_factory):
        snapshot = snapshot_factory(RawSourceBundle())
        assert snapshot.profit_margin is None
        assert snapshot.expense_ratio is None

    def test_trend_flagged_illustrative(self, sample_snapshot):
        assert sample_snapshot.illustrative_trend is True
        assert sample_snapshot.trend_seed == 42


class TestSnapshotInvariants:
    """A snapshot whose totals do not reconcile cannot be constructed."""

    def test_inventory_total_mismatch(self, sample_snapshot):
        with pytest.raises(SnapshotInvariantError) as exc:
            replace(sample_snapshot, total_inventory_value=Decimal("1"))
        assert exc.value.invariant == "inventory_total"

    def test_expense_total_mismatch(self, sample_snapshot):
        with pytest.raises(SnapshotInvariantError) as exc:
            replace(sample_snapshot, total_expenses=Decimal("1"))
        assert exc.value.invariant == "expense_total"

    def test_net_income_mismatch(self, sample_snapshot):
        with pytest.raises(SnapshotInvariantError) as exc:
            replace(sample_snapshot, net_income=Decimal("0"))
        assert exc.value.invariant == "net_income"

    def test_trend_length(self, sample_snapshot):
        with pytest.raises(SnapshotInvariantError) as exc:
            replace(sample_snapshot, monthly_trend=sample_snapshot.monthly_trend[:11])
        assert exc.value.invariant == "trend_length"

    def test_trend_point_net_income(self, sample_snapshot):
        bad = MonthlyTrendPoint("Jan", 2025, Decimal("10"), Decimal("4"), Decimal("5"))
        trend = (bad,) + sample_snapshot.monthly_trend[1:]
        with pytest.raises(SnapshotInvariantError):
            replace(sample_snapshot, monthly_trend=trend)


class TestMonthlyTrend:
    """Tests for the illustrative trend."""

    def test_twelve_months_ending_now(self, sample_snapshot):
        trend = sample_snapshot.monthly_trend
        assert len(trend) == TREND_MONTHS
        assert trend[0].label == "Jun 2024"
        assert trend[-1].label == "May 2025"

    def test_points_reconcile(self, sample_snapshot):
        for point in sample_snapshot.monthly_trend:
            assert point.net_income == point.revenue - point.expenses
            assert point.revenue == point.revenue.to_integral_value()

    def test_points_within_jitter_bounds(self, sample_snapshot):
        monthly_revenue = sample_snapshot.total_revenue / 12
        for point in sample_snapshot.monthly_trend:
            assert monthly_revenue * Decimal("0.8") - 1 <= point.revenue <= monthly_revenue * Decimal("1.2") + 1

    def test_same_seed_same_trend(self, snapshot_factory, sample_bundle):
        first = snapshot_factory(sample_bundle, seed=99)
        second = snapshot_factory(sample_bundle, seed=99)
        assert first.monthly_trend == second.monthly_trend

    def test_fixed_bounds_give_flat_trend(self, clock, sample_bundle):
        fixed = JitterBounds.of(1, 1)
        builder = SnapshotBuilder(clock, TrendConfig(revenue=fixed, expenses=fixed))
        snapshot = builder.build(
            RevenueCalculator().compute_revenue(sample_bundle.appointments),
            ExpenseCalculator().compute_expenses(sample_bundle),
            seed=1,
        )
        # 20500 / 12 = 1708.33 -> 1708
        assert {p.revenue for p in snapshot.monthly_trend} == {Decimal("1708")}

    def test_zero_totals_flat_zero_trend(self, snapshot_factory):
        snapshot = snapshot_factory(RawSourceBundle())
        assert all(p.revenue == 0 and p.expenses == 0 for p in snapshot.monthly_trend)

    def test_year_boundary(self):
        assert trailing_months(2025, 1, 3) == [(2024, 10), (2024, 11), (2025, 0)]

    def test_unseeded_build_records_seed(self, clock):
        snapshot = SnapshotBuilder(clock).build(
            RevenueCalculator().compute_revenue([]),
            ExpenseCalculator().compute_expenses(RawSourceBundle()),
        )
        assert isinstance(snapshot.trend_seed, int)


class TestSnapshotBuilder:
    """Builder metadata and logging."""

    def test_generated_at_from_clock(self, sample_snapshot):
        assert sample_snapshot.generated_at == datetime(2025, 5, 15, 12, 0, tzinfo=timezone.utc)

    def test_unavailable_sources_recorded(self, snapshot_factory):
        bundle = RawSourceBundle(unavailable=(SourceKind.PAYROLL, SourceKind.UTILITIES))
        snapshot = snapshot_factory(bundle)
        assert snapshot.unavailable_sources == (SourceKind.PAYROLL, SourceKind.UTILITIES)

    def test_snapshot_built_logged(self, captured_logs, snapshot_factory, sample_bundle):
        snapshot_factory(sample_bundle, seed=5)
        built = [r for r in captured_logs() if r["message"] == "snapshot_built"]
        assert len(built) == 1
        assert built[0]["trend_seed"] == 5
        assert built[0]["total_revenue"] == "20500"

    def test_later_month_shifts_window(self, sample_bundle):
        clock = DeterministicClock(datetime(2025, 12, 31, tzinfo=timezone.utc))
        snapshot = SnapshotBuilder(clock).build(
            RevenueCalculator().compute_revenue(sample_bundle.appointments),
            ExpenseCalculator().compute_expenses(sample_bundle),
            seed=1,
        )
        assert snapshot.monthly_trend[0].label == "Jan 2025"
        assert snapshot.monthly_trend[-1].label == "Dec 2025"

    def test_revenue_by_rule_read_only(self, sample_snapshot):
        with pytest.raises(TypeError):
            sample_snapshot.revenue_by_rule["Oncology"] = Decimal("1")
        assert "Oncology" not in sample_snapshot.revenue_by_rule
