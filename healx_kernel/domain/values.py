"""
Values -- shared numeric coercion for raw operational records.

Responsibility:
    The single place where untrusted numeric fields from external sources
    become ``Decimal`` money or non-negative integer quantities.  Every
    reducer (payroll, inventory, utilities, suppliers, revenue) goes through
    ``to_money`` / ``to_quantity`` instead of repeating ad hoc fallbacks.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - All monetary amounts are ``Decimal``; floats are converted through
      ``str()`` so binary artefacts never leak into totals.
    - Malformed input (None, blank, non-numeric text, NaN, infinities,
      booleans, containers) is coerced to zero rather than raising.
    - Amount mappings held by frozen value objects are read-only
      (``frozen_amounts``).

Failure modes:
    None -- the functions never raise for bad data.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")
UNIT = Decimal("1")


def to_money(value: Any, default: Decimal = ZERO) -> Decimal:
    """
    Coerce a raw field value to a ``Decimal`` amount.

    Accepts Decimal, int, float and numeric strings (surrounding whitespace
    is ignored).  Anything else, including NaN and infinities, yields
    ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        return Decimal(value)
    elif isinstance(value, (float, str)):
        text = str(value).strip()
        if not text:
            return default
        try:
            result = Decimal(text)
        except InvalidOperation:
            return default
    else:
        return default
    if not result.is_finite():
        return default
    return result


def to_quantity(value: Any) -> int:
    """
    Coerce a raw stock quantity to a non-negative ``int``.

    Fractional quantities are truncated; negative or malformed values
    become 0.
    """
    amount = to_money(value)
    if amount <= ZERO:
        return 0
    return int(amount.to_integral_value(rounding=ROUND_DOWN))


def round_half_up(value: Decimal, exponent: Decimal = UNIT) -> Decimal:
    """Round to ``exponent`` (whole units by default), halves away from zero."""
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def quantize_money(value: Decimal) -> Decimal:
    """Round a monetary amount to cents."""
    return round_half_up(value, CENT)


def frozen_amounts(amounts: Mapping[str, Decimal]) -> MappingProxyType:
    """Read-only copy of a category -> amount mapping, for frozen value objects."""
    if isinstance(amounts, MappingProxyType):
        return amounts
    return MappingProxyType(dict(amounts))
