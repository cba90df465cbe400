"""
Tests for the concurrent source gateway.

Covers:
- All sources fetched into one bundle
- A failing source degrades only its own category
- Unconfigured sources are reported unavailable
- Slow sources are abandoned after the timeout
- Refresh logging carries the refresh id
"""

import threading
from decimal import Decimal

from healx_ingestion.domain.types import SourceEndpoint
from healx_ingestion.gateway import SourceGateway
from healx_kernel.domain.records import SourceKind
from healx_kernel.exceptions import SourceUnavailableError


class _StaticAdapter:
    def __init__(self, kind, rows):
        self.kind = kind
        self.rows = rows

    def fetch(self):
        return list(self.rows)


class _FailingAdapter:
    def __init__(self, kind, error=None):
        self.kind = kind
        self.error = error or SourceUnavailableError(kind.value, "HTTP 500")

    def fetch(self):
        raise self.error


class _BlockingAdapter:
    def __init__(self, kind, release):
        self.kind = kind
        self.release = release

    def fetch(self):
        self.release.wait(5)
        return [{"amount": 1}]


def _rows():
    return {
        SourceKind.APPOINTMENTS: [
            {"status": "accepted", "doctorSpecialty": "Cardiology"},
            {"status": "pending", "doctorSpecialty": "Cardiology"},
        ],
        SourceKind.PAYROLL: [{"employeeId": "E1", "grossSalary": 100000, "bonuses": 5000}],
        SourceKind.INVENTORY: [{"price": 100, "quantity": 2}],
        SourceKind.RESTOCK_SUMMARY: [{"totalRestockValue": 500}],
        SourceKind.UTILITIES: [{"amount": 300}],
        SourceKind.PURCHASE_ORDERS: [{"totalAmount": 700}],
    }


def _gateway(overrides=None):
    adapters = {kind: _StaticAdapter(kind, rows) for kind, rows in _rows().items()}
    adapters.update(overrides or {})
    return SourceGateway(adapters)


class TestRefresh:
    """Tests for SourceGateway.refresh."""

    def test_all_sources(self):
        bundle = _gateway().refresh()

        assert len(bundle.appointments) == 2
        assert bundle.payroll[0].gross_salary == Decimal("100000")
        assert bundle.inventory[0].valuation == Decimal("200")
        assert bundle.restock_summary.total_restock_value == Decimal("500")
        assert bundle.utilities[0].amount == Decimal("300")
        assert bundle.purchase_orders[0].total_amount == Decimal("700")
        assert bundle.unavailable == ()

    def test_failing_source_isolated(self):
        bundle = _gateway({
            SourceKind.INVENTORY: _FailingAdapter(SourceKind.INVENTORY),
        }).refresh()

        assert bundle.inventory == ()
        assert bundle.unavailable == (SourceKind.INVENTORY,)
        assert bundle.restock_summary.total_restock_value == Decimal("500")
        assert len(bundle.payroll) == 1

    def test_unexpected_error_isolated(self):
        bundle = _gateway({
            SourceKind.PAYROLL: _FailingAdapter(SourceKind.PAYROLL, RuntimeError("boom")),
        }).refresh()
        assert bundle.unavailable == (SourceKind.PAYROLL,)
        assert len(bundle.appointments) == 2

    def test_all_sources_failing(self):
        gateway = SourceGateway({kind: _FailingAdapter(kind) for kind in SourceKind})
        bundle = gateway.refresh()
        assert bundle.unavailable == tuple(SourceKind)
        assert bundle.appointments == ()

    def test_unconfigured_source(self, captured_logs):
        adapters = {kind: _StaticAdapter(kind, rows) for kind, rows in _rows().items()}
        del adapters[SourceKind.UTILITIES]
        bundle = SourceGateway(adapters).refresh()

        assert bundle.unavailable == (SourceKind.UTILITIES,)
        assert any(
            r["message"] == "source_not_configured" and r["source"] == "utilities"
            for r in captured_logs()
        )

    def test_no_adapters(self):
        bundle = SourceGateway({}).refresh()
        assert bundle.unavailable == tuple(SourceKind)

    def test_timeout_abandons_slow_source(self, captured_logs):
        release = threading.Event()
        try:
            gateway = _gateway({
                SourceKind.UTILITIES: _BlockingAdapter(SourceKind.UTILITIES, release),
            })
            bundle = gateway.refresh(timeout=0.2)
        finally:
            release.set()

        assert bundle.unavailable == (SourceKind.UTILITIES,)
        assert bundle.utilities == ()
        assert len(bundle.payroll) == 1
        assert any(r["message"] == "source_fetch_abandoned" for r in captured_logs())


class TestRefreshLogging:
    """Structured log records of a refresh."""

    def test_failure_logged_with_refresh_id(self, captured_logs):
        _gateway({SourceKind.PAYROLL: _FailingAdapter(SourceKind.PAYROLL)}).refresh()
        logs = captured_logs()

        failed = [r for r in logs if r["message"] == "source_fetch_failed"]
        completed = [r for r in logs if r["message"] == "source_refresh_completed"]
        assert len(failed) == 1
        assert failed[0]["source"] == "payroll"
        assert failed[0]["error_code"] == "SOURCE_UNAVAILABLE"
        assert len(completed) == 1
        assert failed[0]["refresh_id"] == completed[0]["refresh_id"]
        assert completed[0]["unavailable"] == ["payroll"]
        assert completed[0]["record_counts"]["appointments"] == 2


class TestFromEndpoints:
    """Gateway construction from configured endpoints."""

    def test_file_endpoints(self, tmp_path):
        path = tmp_path / "orders.json"
        path.write_text('[{"totalAmount": 10}, {"totalAmount": 15}]')
        gateway = SourceGateway.from_endpoints({
            SourceKind.PURCHASE_ORDERS: SourceEndpoint(str(path), transport="file"),
        })
        bundle = gateway.refresh()

        assert sum(o.total_amount for o in bundle.purchase_orders) == Decimal("25")
        assert SourceKind.PURCHASE_ORDERS not in bundle.unavailable
        assert len(bundle.unavailable) == 5
