"""
healx_ingestion.mapping -- Raw payload dicts to typed operational records.

Responsibility:
    Translate the loosely-typed dicts returned by source adapters into the
    kernel's frozen record types.  The back office mixes camelCase and
    snake_case field names; every field is looked up through an alias list.
    Numeric fields go through ``to_money`` / ``to_quantity``, so malformed
    values become zero instead of failing the refresh.

Architecture position:
    Ingestion -- pure transformation, no I/O.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from healx_kernel.domain.records import (
    RawAppointment,
    RawInventoryItem,
    RawPayrollRecord,
    RawPurchaseOrder,
    RawSourceBundle,
    RawUtilityBill,
    RestockSummary,
    SourceKind,
)
from healx_kernel.domain.values import to_money, to_quantity

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "status": ("status", "appointmentStatus", "appointment_status"),
    "doctor_specialty": ("doctorSpecialty", "doctor_specialty", "specialty", "specialization"),
    "employee_id": ("employeeId", "employee_id", "empId"),
    "gross_salary": ("grossSalary", "gross_salary"),
    "bonuses": ("bonuses", "bonus"),
    "price": ("price", "unitPrice", "unit_price"),
    "quantity": ("quantity", "qty"),
    "total_restock_value": ("totalRestockValue", "total_restock_value"),
    "amount": ("amount",),
    "total_amount": ("totalAmount", "total_amount"),
}


def pick(row: Mapping[str, Any], field: str) -> Any:
    """First present alias of ``field`` in ``row``; None when absent."""
    for alias in FIELD_ALIASES[field]:
        if alias in row and row[alias] is not None:
            return row[alias]
    return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def map_appointment(row: Mapping[str, Any]) -> RawAppointment:
    return RawAppointment(
        status=_text(pick(row, "status")),
        doctor_specialty=_text(pick(row, "doctor_specialty")),
    )


def map_payroll(row: Mapping[str, Any]) -> RawPayrollRecord:
    employee_id = pick(row, "employee_id")
    return RawPayrollRecord(
        employee_id=str(employee_id) if employee_id not in (None, "") else None,
        gross_salary=to_money(pick(row, "gross_salary")),
        bonuses=to_money(pick(row, "bonuses")),
    )


def map_inventory_item(row: Mapping[str, Any]) -> RawInventoryItem:
    return RawInventoryItem(
        price=to_money(pick(row, "price")),
        quantity=to_quantity(pick(row, "quantity")),
    )


def map_restock_summary(rows: Iterable[Mapping[str, Any]]) -> RestockSummary:
    """The summary endpoint reports one object; the first one wins."""
    for row in rows:
        return RestockSummary(total_restock_value=to_money(pick(row, "total_restock_value")))
    return RestockSummary()


def map_utility_bill(row: Mapping[str, Any]) -> RawUtilityBill:
    return RawUtilityBill(amount=to_money(pick(row, "amount")))


def map_purchase_order(row: Mapping[str, Any]) -> RawPurchaseOrder:
    return RawPurchaseOrder(total_amount=to_money(pick(row, "total_amount")))


_ROW_MAPPERS: dict[SourceKind, Callable[[Mapping[str, Any]], Any]] = {
    SourceKind.APPOINTMENTS: map_appointment,
    SourceKind.PAYROLL: map_payroll,
    SourceKind.INVENTORY: map_inventory_item,
    SourceKind.UTILITIES: map_utility_bill,
    SourceKind.PURCHASE_ORDERS: map_purchase_order,
}


def map_bundle(
    records: Mapping[SourceKind, Iterable[Mapping[str, Any]]],
    unavailable: Iterable[SourceKind] = (),
) -> RawSourceBundle:
    """
    Build the bundle of one refresh.

    Kinds missing from ``records`` contribute an empty collection.
    """
    slots: dict[str, Any] = {}
    for kind, mapper in _ROW_MAPPERS.items():
        slots[kind.value] = tuple(mapper(row) for row in records.get(kind, ()))
    slots[SourceKind.RESTOCK_SUMMARY.value] = map_restock_summary(
        records.get(SourceKind.RESTOCK_SUMMARY, ())
    )
    failed = set(unavailable)
    ordered_unavailable = tuple(kind for kind in SourceKind if kind in failed)
    return RawSourceBundle(**slots, unavailable=ordered_unavailable)
