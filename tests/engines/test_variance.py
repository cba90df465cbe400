"""
Tests for the budget-vs-actual variance analyzer.

Covers:
- Quarter variance arithmetic
- Quarters without actuals are skipped, never shown as zero
- Category deltas and percentages
- Plan-level summary
"""

from decimal import Decimal

from healx_engines.variance import VarianceAnalyzer, period_label
from healx_modules.budget.models import Quarter, QuarterFigures


def _figures(consultations, payroll, inventory="0", utilities="0", suppliers="0"):
    return QuarterFigures(
        revenue={"consultations": Decimal(consultations)},
        expenses={
            "payroll": Decimal(payroll),
            "inventory": Decimal(inventory),
            "utilities": Decimal(utilities),
            "suppliers": Decimal(suppliers),
        },
    )


class _Plan:
    def __init__(self, quarters):
        self.quarters = tuple(quarters)


class TestCompare:
    """Tests for VarianceAnalyzer.compare."""

    def setup_method(self):
        self.analyzer = VarianceAnalyzer()

    def test_variance_formula(self):
        quarter = Quarter(2025, 1, _figures("1000", "600"), _figures("1200", "650"))
        row = self.analyzer.compare(quarter)

        assert row.period == "Q1 2025"
        assert row.budgeted_revenue == Decimal("1000")
        assert row.actual_expenses == Decimal("650")
        # (1200 - 650) - (1000 - 600) = 150
        assert row.variance == Decimal("150")
        assert row.budgeted_net == Decimal("400")
        assert row.actual_net == Decimal("550")
        assert row.is_favorable

    def test_unfavorable(self):
        quarter = Quarter(2025, 2, _figures("1000", "600"), _figures("900", "700"))
        row = self.analyzer.compare(quarter)
        assert row.variance == Decimal("-200")
        assert not row.is_favorable

    def test_no_actual_yields_none(self):
        assert self.analyzer.compare(Quarter(2026, 1, _figures("1", "1"))) is None

    def test_zero_actuals_are_compared(self):
        quarter = Quarter(2025, 1, _figures("100", "50"), _figures("0", "0"))
        assert self.analyzer.compare(quarter).variance == Decimal("-50")


class TestComparePlan:
    """Tests for plan-wide comparisons."""

    def setup_method(self):
        self.analyzer = VarianceAnalyzer()

    def test_only_quarters_with_actuals(self):
        plan = _Plan([
            Quarter(2025, 1, _figures("100", "50"), _figures("110", "50")),
            Quarter(2025, 2, _figures("100", "50"), _figures("90", "40")),
            Quarter(2025, 3, _figures("100", "50")),
            Quarter(2025, 4, _figures("100", "50")),
        ])
        rows = self.analyzer.compare_plan(plan)
        assert [r.period for r in rows] == ["Q1 2025", "Q2 2025"]

    def test_future_plan_has_no_rows(self):
        plan = _Plan([Quarter(2030, q, _figures("1", "1")) for q in range(1, 5)])
        assert self.analyzer.compare_plan(plan) == []

    def test_summary(self):
        plan = _Plan([
            Quarter(2025, 1, _figures("100", "50"), _figures("110", "50")),
            Quarter(2025, 2, _figures("100", "50"), _figures("90", "40")),
            Quarter(2025, 3, _figures("100", "50")),
        ])
        summary = self.analyzer.summarize(plan)
        assert summary.quarters_compared == 2
        assert summary.budgeted_revenue == Decimal("200")
        assert summary.actual_revenue == Decimal("200")
        # (+10) + (0) = 10
        assert summary.total_variance == Decimal("10")

    def test_period_label(self):
        assert period_label(2027, 4) == "Q4 2027"


class TestCategoryVariances:
    """Tests for per-category deltas."""

    def setup_method(self):
        self.analyzer = VarianceAnalyzer()

    def test_rows_per_category(self):
        quarter = Quarter(
            2025, 1,
            _figures("1000", "600", "200", "100", "50"),
            _figures("1100", "570", "200", "120", "50"),
        )
        rows = {r.category: r for r in self.analyzer.category_variances(quarter)}

        assert set(rows) == {"consultations", "payroll", "inventory", "utilities", "suppliers"}
        assert rows["consultations"].kind == "revenue"
        assert rows["consultations"].delta == Decimal("100")
        assert rows["consultations"].pct == Decimal("10.00")
        assert rows["consultations"].is_favorable
        assert rows["payroll"].delta == Decimal("-30")
        assert rows["payroll"].pct == Decimal("-5.00")
        assert rows["payroll"].is_favorable
        assert rows["utilities"].pct == Decimal("20.00")
        assert not rows["utilities"].is_favorable

    def test_zero_budget_pct_is_zero(self):
        quarter = Quarter(2025, 1, _figures("0", "0"), _figures("100", "10"))
        rows = self.analyzer.category_variances(quarter)
        assert all(r.pct == Decimal("0") for r in rows)

    def test_pct_rounded_to_hundredths(self):
        quarter = Quarter(2025, 1, _figures("3", "0"), _figures("4", "0"))
        consultations = self.analyzer.category_variances(quarter)[0]
        assert consultations.pct == Decimal("33.33")

    def test_no_actual_no_rows(self):
        assert self.analyzer.category_variances(Quarter(2025, 4, _figures("1", "1"))) == []
