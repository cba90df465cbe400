"""
healx_engines.expense -- Payroll, inventory, utility and supplier expense reductions.

Responsibility:
    Four independent reductions over raw records, combined into a single
    ``ExpenseResult``:

    * Payroll -- per record ``gross + bonuses + EPF + ETF`` where the
      employer contributions are ``round_half_up(gross * rate)``.  Rounding
      happens per record, before summation.  Employee-side deductions are
      never part of the employer's expense.
    * Inventory -- ``sum(price * quantity)`` of stock on hand, plus the
      pre-aggregated restock spend taken verbatim.
    * Utilities -- ``sum(amount)``.
    * Suppliers -- ``sum(total_amount)`` of purchase orders.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``inventory.total_value == current_stock_value + total_auto_restock_value``.
    - ``total == payroll + utilities + inventory + suppliers``.
    - A source listed as unavailable in the bundle contributes an empty
      collection; it never fails the whole computation.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from healx_engines.tracer import traced_engine
from healx_kernel.domain.records import (
    RawInventoryItem,
    RawPayrollRecord,
    RawPurchaseOrder,
    RawSourceBundle,
    RawUtilityBill,
    RestockSummary,
)
from healx_kernel.domain.values import ZERO, round_half_up, to_money
from healx_kernel.logging_config import get_logger

logger = get_logger("engines.expense")


@dataclass(frozen=True)
class PayrollRates:
    """Employer contribution rates applied to gross salary."""

    epf_rate: Decimal = Decimal("0.12")
    etf_rate: Decimal = Decimal("0.03")

    def __post_init__(self) -> None:
        for name in ("epf_rate", "etf_rate"):
            rate = to_money(getattr(self, name), default=Decimal("-1"))
            if rate < 0 or rate > 1:
                raise ValueError(f"{name} must be between 0 and 1, got {getattr(self, name)!r}")
            object.__setattr__(self, name, rate)


@dataclass(frozen=True)
class PayrollSummary:
    total: Decimal = ZERO
    gross: Decimal = ZERO
    bonuses: Decimal = ZERO
    employer_epf: Decimal = ZERO
    employer_etf: Decimal = ZERO
    record_count: int = 0
    employee_count: int = 0


@dataclass(frozen=True)
class InventoryValuation:
    current_stock_value: Decimal = ZERO
    total_auto_restock_value: Decimal = ZERO

    @property
    def total_value(self) -> Decimal:
        return self.current_stock_value + self.total_auto_restock_value


@dataclass(frozen=True)
class ExpenseResult:
    payroll: PayrollSummary
    inventory: InventoryValuation
    utilities: Decimal = ZERO
    suppliers: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.payroll.total + self.utilities + self.inventory.total_value + self.suppliers


class ExpenseCalculator:
    """Pure expense reductions parameterized by payroll rates."""

    def __init__(self, rates: PayrollRates | None = None):
        self.rates = rates or PayrollRates()

    def compute_payroll(self, records: Iterable[RawPayrollRecord]) -> PayrollSummary:
        total = gross_total = bonus_total = epf_total = etf_total = ZERO
        record_count = 0
        employees: set[str] = set()

        for record in records:
            gross = to_money(record.gross_salary)
            bonuses = to_money(record.bonuses)
            epf = round_half_up(gross * self.rates.epf_rate)
            etf = round_half_up(gross * self.rates.etf_rate)

            total += gross + bonuses + epf + etf
            gross_total += gross
            bonus_total += bonuses
            epf_total += epf
            etf_total += etf
            record_count += 1
            if record.employee_id:
                employees.add(record.employee_id)

        return PayrollSummary(
            total=total,
            gross=gross_total,
            bonuses=bonus_total,
            employer_epf=epf_total,
            employer_etf=etf_total,
            record_count=record_count,
            employee_count=len(employees),
        )

    def compute_inventory(
        self,
        items: Iterable[RawInventoryItem],
        restock: RestockSummary | None = None,
    ) -> InventoryValuation:
        stock = sum((to_money(item.price) * item.quantity for item in items), ZERO)
        restock_value = to_money(restock.total_restock_value) if restock else ZERO
        return InventoryValuation(
            current_stock_value=stock,
            total_auto_restock_value=restock_value,
        )

    def compute_utilities(self, bills: Iterable[RawUtilityBill]) -> Decimal:
        return sum((to_money(bill.amount) for bill in bills), ZERO)

    def compute_suppliers(self, orders: Iterable[RawPurchaseOrder]) -> Decimal:
        return sum((to_money(order.total_amount) for order in orders), ZERO)

    @traced_engine("expense", "1.0", fingerprint_fields=("bundle",))
    def compute_expenses(self, bundle: RawSourceBundle) -> ExpenseResult:
        result = ExpenseResult(
            payroll=self.compute_payroll(bundle.payroll),
            inventory=self.compute_inventory(bundle.inventory, bundle.restock_summary),
            utilities=self.compute_utilities(bundle.utilities),
            suppliers=self.compute_suppliers(bundle.purchase_orders),
        )
        logger.debug(
            "expenses_computed",
            extra={
                "payroll_records": result.payroll.record_count,
                "inventory_items": len(bundle.inventory),
                "utility_bills": len(bundle.utilities),
                "purchase_orders": len(bundle.purchase_orders),
                "total_expenses": str(result.total),
            },
        )
        return result
