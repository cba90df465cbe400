"""
Records -- immutable operational records and the per-refresh source bundle.

Responsibility:
    The typed shape of everything pulled from the six operational sources.
    Ingestion maps untrusted payloads into these values; engines reduce
    them.  Neither side sees raw dicts of the other.

Architecture position:
    Kernel > Domain -- pure, no I/O.

Invariants enforced:
    - Appointment status is stored lowercased and stripped.
    - Monetary fields are ``Decimal``; quantities are non-negative ``int``.
    - Employer EPF/ETF contributions are never stored on a payroll record;
      they are derived by the expense engine.
    - A ``RawSourceBundle`` holds exactly one slot per ``SourceKind``; a
      failed source is an empty slot listed in ``unavailable``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from healx_kernel.domain.values import ZERO


class SourceKind(str, Enum):
    """The six operational sources a refresh pulls from."""

    APPOINTMENTS = "appointments"
    PAYROLL = "payroll"
    INVENTORY = "inventory"
    RESTOCK_SUMMARY = "restock_summary"
    UTILITIES = "utilities"
    PURCHASE_ORDERS = "purchase_orders"


ACCEPTED_STATUS = "accepted"


@dataclass(frozen=True)
class RawAppointment:
    status: str
    doctor_specialty: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", (self.status or "").strip().lower())
        object.__setattr__(self, "doctor_specialty", self.doctor_specialty or "")

    @property
    def is_accepted(self) -> bool:
        return self.status == ACCEPTED_STATUS


@dataclass(frozen=True)
class RawPayrollRecord:
    employee_id: str | None
    gross_salary: Decimal = ZERO
    bonuses: Decimal = ZERO


@dataclass(frozen=True)
class RawInventoryItem:
    price: Decimal = ZERO
    quantity: int = 0

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValueError(f"Inventory quantity cannot be negative: {self.quantity}")

    @property
    def valuation(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class RestockSummary:
    """Pre-aggregated restock spend reported by the inventory system."""

    total_restock_value: Decimal = ZERO


@dataclass(frozen=True)
class RawUtilityBill:
    amount: Decimal = ZERO


@dataclass(frozen=True)
class RawPurchaseOrder:
    total_amount: Decimal = ZERO


@dataclass(frozen=True)
class RawSourceBundle:
    """All raw records of one refresh."""

    appointments: tuple[RawAppointment, ...] = ()
    payroll: tuple[RawPayrollRecord, ...] = ()
    inventory: tuple[RawInventoryItem, ...] = ()
    restock_summary: RestockSummary = RestockSummary()
    utilities: tuple[RawUtilityBill, ...] = ()
    purchase_orders: tuple[RawPurchaseOrder, ...] = ()
    unavailable: tuple[SourceKind, ...] = ()

    def is_available(self, kind: SourceKind) -> bool:
        return kind not in self.unavailable
