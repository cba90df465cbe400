"""
Pure domain layer.

No dependencies on ORM, database or I/O.  Time is only read through an
injected ``Clock``; randomness only through a seeded ``JitterSource``.
"""

from healx_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from healx_kernel.domain.jitter import JitterBounds, JitterSource
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
from healx_kernel.domain.values import (
    ZERO,
    quantize_money,
    round_half_up,
    to_money,
    to_quantity,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "JitterBounds",
    "JitterSource",
    "RawAppointment",
    "RawInventoryItem",
    "RawPayrollRecord",
    "RawPurchaseOrder",
    "RawSourceBundle",
    "RawUtilityBill",
    "RestockSummary",
    "SourceKind",
    "SystemClock",
    "ZERO",
    "quantize_money",
    "round_half_up",
    "to_money",
    "to_quantity",
]
