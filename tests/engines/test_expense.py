"""
Tests for the expense calculator.

Covers:
- Payroll with employer EPF/ETF, rounded per record
- Inventory valuation plus restock spend
- Utilities and supplier sums
- Unavailable sources contribute zero
- Rate validation
"""

from decimal import Decimal

import pytest

from healx_engines.expense import ExpenseCalculator, PayrollRates
from healx_kernel.domain.records import (
    RawInventoryItem,
    RawPayrollRecord,
    RawPurchaseOrder,
    RawSourceBundle,
    RawUtilityBill,
    RestockSummary,
    SourceKind,
)


class TestPayroll:
    """Tests for compute_payroll."""

    def setup_method(self):
        self.calculator = ExpenseCalculator()

    def test_gross_bonus_and_contributions(self):
        summary = self.calculator.compute_payroll(
            [RawPayrollRecord("E1", Decimal("100000"), Decimal("5000"))]
        )

        assert summary.total == Decimal("120000")
        assert summary.employer_epf == Decimal("12000")
        assert summary.employer_etf == Decimal("3000")
        assert summary.record_count == 1
        assert summary.employee_count == 1

    def test_rounding_per_record(self):
        """EPF/ETF are rounded half-up for each record before summation."""
        records = [RawPayrollRecord(f"E{i}", Decimal("10.50"), Decimal("0")) for i in range(2)]
        summary = self.calculator.compute_payroll(records)

        # 10.50 x 0.12 = 1.26 -> 1 each; 10.50 x 0.03 = 0.315 -> 0 each
        assert summary.employer_epf == Decimal("2")
        assert summary.employer_etf == Decimal("0")
        assert summary.total == Decimal("23.00")

    def test_employee_count_distinct(self):
        records = [
            RawPayrollRecord("E1", Decimal("1000")),
            RawPayrollRecord("E1", Decimal("1000")),
            RawPayrollRecord(None, Decimal("1000")),
        ]
        summary = self.calculator.compute_payroll(records)
        assert summary.record_count == 3
        assert summary.employee_count == 1

    def test_empty(self):
        assert self.calculator.compute_payroll([]).total == Decimal("0")

    def test_custom_rates(self):
        calculator = ExpenseCalculator(PayrollRates(epf_rate=Decimal("0.10"), etf_rate=Decimal("0")))
        summary = calculator.compute_payroll([RawPayrollRecord("E1", Decimal("1000"))])
        assert summary.total == Decimal("1100")

    @pytest.mark.parametrize("rate", ["-0.01", "1.5"])
    def test_invalid_rate_rejected(self, rate):
        with pytest.raises(ValueError):
            PayrollRates(epf_rate=Decimal(rate))


class TestInventoryAndOthers:
    """Tests for inventory, utilities and suppliers."""

    def setup_method(self):
        self.calculator = ExpenseCalculator()

    def test_inventory_valuation(self):
        valuation = self.calculator.compute_inventory(
            [RawInventoryItem(Decimal("100"), 10), RawInventoryItem(Decimal("2.50"), 4)],
            RestockSummary(Decimal("500")),
        )
        assert valuation.current_stock_value == Decimal("1010.00")
        assert valuation.total_auto_restock_value == Decimal("500")
        assert valuation.total_value == Decimal("1510.00")

    def test_restock_taken_verbatim_without_items(self):
        valuation = self.calculator.compute_inventory([], RestockSummary(Decimal("500")))
        assert valuation.current_stock_value == Decimal("0")
        assert valuation.total_value == Decimal("500")

    def test_utilities(self):
        bills = [RawUtilityBill(Decimal("1200.25")), RawUtilityBill(Decimal("799.75"))]
        assert self.calculator.compute_utilities(bills) == Decimal("2000.00")

    def test_suppliers(self):
        orders = [RawPurchaseOrder(Decimal("3000")), RawPurchaseOrder(Decimal("4500"))]
        assert self.calculator.compute_suppliers(orders) == Decimal("7500")


class TestComputeExpenses:
    """Tests for the combined reduction."""

    def setup_method(self):
        self.calculator = ExpenseCalculator()

    def test_total_reconciles(self, sample_bundle):
        result = self.calculator.compute_expenses(sample_bundle)

        assert result.payroll.total == Decimal("177500")
        assert result.inventory.total_value == Decimal("3502.00")
        assert result.utilities == Decimal("2000")
        assert result.suppliers == Decimal("7500")
        assert result.total == Decimal("190502.00")

    def test_failed_inventory_with_restock(self):
        """Inventory source down: stock counts as zero, restock still counts."""
        bundle = RawSourceBundle(
            restock_summary=RestockSummary(Decimal("500")),
            unavailable=(SourceKind.INVENTORY,),
        )
        result = self.calculator.compute_expenses(bundle)

        assert result.inventory.current_stock_value == Decimal("0")
        assert result.inventory.total_value == Decimal("500")
        assert result.total == Decimal("500")

    def test_empty_bundle(self):
        assert self.calculator.compute_expenses(RawSourceBundle()).total == Decimal("0")
