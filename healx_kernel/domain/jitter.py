"""
Jitter -- seeded, bounded multiplicative noise.

Responsibility:
    Supplies the planning-variance and trend-smoothing factors used when a
    snapshot's annual totals are spread across months or quarters.  The
    source is always seeded, so identical inputs and seed give identical
    output.  When no seed is supplied one is drawn once and kept on the
    source so the caller can record it and replay the result later.

Architecture position:
    Kernel > Domain -- pure, no I/O.

Invariants enforced:
    - ``0 < low <= high`` for every ``JitterBounds``.
    - Factors are exact ``Decimal`` values on a 1e-6 grid inside the bounds
      (both ends inclusive).
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from healx_kernel.domain.values import to_money

_GRID = 1_000_000


@dataclass(frozen=True)
class JitterBounds:
    """Inclusive range of a multiplicative jitter factor."""

    low: Decimal
    high: Decimal

    def __post_init__(self) -> None:
        low = to_money(self.low, default=Decimal("-1"))
        high = to_money(self.high, default=Decimal("-1"))
        if low <= 0 or high <= 0:
            raise ValueError(f"Jitter bounds must be positive: {self.low!r}, {self.high!r}")
        if low > high:
            raise ValueError(f"Jitter low bound {low} exceeds high bound {high}")
        object.__setattr__(self, "low", low)
        object.__setattr__(self, "high", high)

    @classmethod
    def of(cls, low: Any, high: Any) -> JitterBounds:
        return cls(low=Decimal(str(low)), high=Decimal(str(high)))

    @classmethod
    def symmetric(cls, spread: Any) -> JitterBounds:
        """Bounds ``1 - spread`` .. ``1 + spread``."""
        s = Decimal(str(spread))
        return cls(low=Decimal("1") - s, high=Decimal("1") + s)

    @property
    def is_fixed(self) -> bool:
        return self.low == self.high


class JitterSource:
    """
    Deterministic pseudo-random factor generator.

    Contract:
        Two sources built with the same seed yield the same sequence of
        factors for the same sequence of bounds.
    """

    def __init__(self, seed: int | None = None):
        if seed is None:
            seed = random.SystemRandom().randrange(2**31)
        self.seed = seed
        self._rng = random.Random(seed)

    def factor(self, bounds: JitterBounds) -> Decimal:
        """Draw one factor within ``bounds``."""
        step = Decimal(self._rng.randrange(0, _GRID + 1)) / Decimal(_GRID)
        return bounds.low + (bounds.high - bounds.low) * step
