"""
Tests for seeded jitter.

Covers:
- Bounds validation
- Factors stay within bounds
- Same seed gives the same sequence
- A drawn seed is recorded on the source
"""

from decimal import Decimal

import pytest

from healx_kernel.domain.jitter import JitterBounds, JitterSource


class TestJitterBounds:
    """Tests for JitterBounds."""

    def test_of_parses_strings(self):
        bounds = JitterBounds.of("0.8", "1.2")
        assert bounds.low == Decimal("0.8")
        assert bounds.high == Decimal("1.2")

    def test_symmetric(self):
        bounds = JitterBounds.symmetric("0.1")
        assert bounds.low == Decimal("0.9")
        assert bounds.high == Decimal("1.1")

    def test_fixed(self):
        assert JitterBounds.of(1, 1).is_fixed

    @pytest.mark.parametrize("low, high", [("0", "1"), ("-0.5", "1"), ("1.2", "0.8"), ("0.5", "0")])
    def test_invalid_bounds_rejected(self, low, high):
        with pytest.raises(ValueError):
            JitterBounds.of(low, high)


class TestJitterSource:
    """Tests for JitterSource."""

    def test_factors_within_bounds(self):
        source = JitterSource(7)
        bounds = JitterBounds.of("0.85", "1.15")
        for _ in range(500):
            factor = source.factor(bounds)
            assert bounds.low <= factor <= bounds.high

    def test_same_seed_same_sequence(self):
        bounds = JitterBounds.of("0.8", "1.2")
        first = JitterSource(123)
        second = JitterSource(123)
        assert [first.factor(bounds) for _ in range(20)] == [second.factor(bounds) for _ in range(20)]

    def test_different_seeds_differ(self):
        bounds = JitterBounds.of("0.8", "1.2")
        a, b = JitterSource(1), JitterSource(2)
        assert [a.factor(bounds) for _ in range(10)] != [b.factor(bounds) for _ in range(10)]

    def test_fixed_bounds_give_exact_factor(self):
        source = JitterSource(5)
        assert source.factor(JitterBounds.of(1, 1)) == Decimal("1")

    def test_unseeded_source_records_seed(self):
        source = JitterSource()
        assert isinstance(source.seed, int)
        bounds = JitterBounds.of("0.8", "1.2")
        replay = JitterSource(source.seed)
        assert [source.factor(bounds) for _ in range(5)] == [replay.factor(bounds) for _ in range(5)]
