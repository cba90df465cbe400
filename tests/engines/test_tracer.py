"""Tests for the engine invocation tracer."""

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from healx_engines.tracer import compute_input_fingerprint, traced_engine


@dataclass(frozen=True)
class _Item:
    amount: Decimal


class _Engine:
    @traced_engine("sample", "2.1", fingerprint_fields=("items", "seed"))
    def run(self, items, seed=None):
        return sum((i.amount for i in items), Decimal("0"))


class TestFingerprint:
    """Fingerprints are deterministic and input-sensitive."""

    def test_deterministic(self):
        args = {"items": [_Item(Decimal("1.50"))], "seed": 3}
        assert compute_input_fingerprint(("items", "seed"), args) == compute_input_fingerprint(
            ("items", "seed"), dict(args)
        )

    def test_sensitive_to_values(self):
        a = compute_input_fingerprint(("items",), {"items": [_Item(Decimal("1"))]})
        b = compute_input_fingerprint(("items",), {"items": [_Item(Decimal("2"))]})
        assert a != b

    def test_dict_key_order_irrelevant(self):
        a = compute_input_fingerprint(("m",), {"m": {"x": 1, "y": 2}})
        b = compute_input_fingerprint(("m",), {"m": {"y": 2, "x": 1}})
        assert a == b

    def test_read_only_mapping_matches_dict(self):
        a = compute_input_fingerprint(("m",), {"m": {"x": 1, "y": 2}})
        b = compute_input_fingerprint(("m",), {"m": MappingProxyType({"y": 2, "x": 1})})
        assert a == b

    def test_length(self):
        assert len(compute_input_fingerprint(("x",), {})) == 16


class TestTracedEngine:
    """The decorator returns the result and emits one trace record."""

    def test_result_passthrough(self):
        assert _Engine().run([_Item(Decimal("2")), _Item(Decimal("3"))]) == Decimal("5")

    def test_trace_record(self, captured_logs):
        _Engine().run([_Item(Decimal("2"))], seed=9)

        traces = [r for r in captured_logs() if r["message"] == "HEALX_ENGINE_TRACE"]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["engine_name"] == "sample"
        assert trace["engine_version"] == "2.1"
        assert trace["function"] == "_Engine.run"
        assert trace["duration_ms"] >= 0

    def test_positional_and_keyword_fingerprints_match(self, captured_logs):
        engine = _Engine()
        engine.run([_Item(Decimal("2"))], 9)
        engine.run([_Item(Decimal("2"))], seed=9)

        fps = [r["input_fingerprint"] for r in captured_logs() if r["message"] == "HEALX_ENGINE_TRACE"]
        assert len(fps) == 2
        assert fps[0] == fps[1]
