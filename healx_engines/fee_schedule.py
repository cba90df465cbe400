"""
healx_engines.fee_schedule -- Consultation fee lookup by doctor specialty.

Responsibility:
    Map a free-text specialty label to the consultation fee charged for an
    accepted appointment.  Matching is case-insensitive substring
    containment against an ordered rule list; the first rule whose keyword
    occurs in the label wins.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Rule order is part of the contract ("general cardiology" is a
      cardiology label, because cardiology precedes general-physician).
    - Empty or unmatched labels resolve to ``DEFAULT_FEE``.
    - Resolution is deterministic and idempotent.

Usage:
    from healx_engines.fee_schedule import FeeSchedule

    FeeSchedule().resolve_fee("Senior Cardiologist")  # Decimal("6000")
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

DEFAULT_FEE = Decimal("5000")


@dataclass(frozen=True)
class FeeRule:
    """One row of the fee table."""

    name: str
    keywords: tuple[str, ...]
    fee: Decimal

    def matches(self, label: str) -> bool:
        return any(keyword in label for keyword in self.keywords)


STANDARD_RULES: tuple[FeeRule, ...] = (
    FeeRule("cardiology", ("cardio",), Decimal("6000")),
    FeeRule("orthopedics", ("orthopedic",), Decimal("6000")),
    FeeRule("dermatology", ("dermatolog",), Decimal("5500")),
    FeeRule("general-physician", ("general",), Decimal("4000")),
    FeeRule("neurology", ("neurolog",), Decimal("7000")),
    FeeRule("pediatrics", ("pediatric",), Decimal("4500")),
    FeeRule("gynecology", ("gynecolog",), Decimal("5500")),
    FeeRule("psychiatry", ("psychiatr",), Decimal("6500")),
    FeeRule("dental", ("dental", "dentist"), Decimal("3500")),
    FeeRule("ophthalmology", ("eye", "ophthalmolog"), Decimal("5000")),
    FeeRule("ent", ("ent",), Decimal("4800")),
)


class FeeSchedule:
    """Ordered fee table with a default fallback."""

    def __init__(
        self,
        rules: tuple[FeeRule, ...] = STANDARD_RULES,
        default_fee: Decimal = DEFAULT_FEE,
    ):
        self.rules = rules
        self.default_fee = default_fee

    def match_rule(self, specialty_label: str | None) -> FeeRule | None:
        """First rule whose keyword occurs in the label, or None."""
        label = (specialty_label or "").lower()
        if not label:
            return None
        for rule in self.rules:
            if rule.matches(label):
                return rule
        return None

    def resolve_fee(self, specialty_label: str | None) -> Decimal:
        rule = self.match_rule(specialty_label)
        return rule.fee if rule is not None else self.default_fee
