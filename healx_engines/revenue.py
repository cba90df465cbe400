"""
healx_engines.revenue -- Consultation revenue from accepted appointments.

Responsibility:
    Sum the consultation fee of every accepted appointment.  Appointments in
    any other status (pending, rejected, cancelled, ...) contribute nothing.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``total == sum(resolve_fee(a.doctor_specialty))`` over accepted
      appointments; empty input gives ``(0, 0)``.
    - ``sum(by_rule.values()) == total``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from healx_engines.fee_schedule import FeeSchedule
from healx_engines.tracer import traced_engine
from healx_kernel.domain.records import RawAppointment
from healx_kernel.domain.values import ZERO, frozen_amounts
from healx_kernel.logging_config import get_logger

logger = get_logger("engines.revenue")

DEFAULT_RULE_LABEL = "default"


@dataclass(frozen=True)
class RevenueResult:
    total: Decimal = ZERO
    count: int = 0
    by_rule: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "by_rule", frozen_amounts(self.by_rule))


class RevenueCalculator:
    """Reduces appointments to consultation revenue."""

    def __init__(self, fee_schedule: FeeSchedule | None = None):
        self.fee_schedule = fee_schedule or FeeSchedule()

    @traced_engine("revenue", "1.0", fingerprint_fields=("appointments",))
    def compute_revenue(self, appointments: Iterable[RawAppointment]) -> RevenueResult:
        total = ZERO
        count = 0
        by_rule: dict[str, Decimal] = {}

        for appointment in appointments:
            if not appointment.is_accepted:
                continue
            rule = self.fee_schedule.match_rule(appointment.doctor_specialty)
            fee = rule.fee if rule is not None else self.fee_schedule.default_fee
            label = rule.name if rule is not None else DEFAULT_RULE_LABEL
            by_rule[label] = by_rule.get(label, ZERO) + fee
            total += fee
            count += 1

        logger.debug(
            "revenue_computed",
            extra={"accepted_appointments": count, "total_revenue": str(total)},
        )
        return RevenueResult(total=total, count=count, by_rule=by_rule)
