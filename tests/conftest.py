"""
Pytest fixtures for the Heal-x financial engine test suite.

Provides:
- Session-wide structured logging and per-test log context cleanup
- Log capture as parsed JSON dicts
- A deterministic clock (2025-05-15 12:00 UTC, i.e. Q2 2025)
- Sample raw records and a source bundle built from them
- Snapshot and plan-store factories
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from healx_engines.expense import ExpenseCalculator
from healx_engines.revenue import RevenueCalculator
from healx_engines.snapshot import SnapshotBuilder
from healx_kernel.domain.clock import DeterministicClock
from healx_kernel.domain.records import (
    RawAppointment,
    RawInventoryItem,
    RawPayrollRecord,
    RawPurchaseOrder,
    RawSourceBundle,
    RawUtilityBill,
    RestockSummary,
)
from healx_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from healx_modules.budget.service import BudgetPlanStore


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Enable structured logging for the whole test session."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent leakage."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture healx logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "snapshot_built" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("healx")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


@pytest.fixture
def clock():
    return DeterministicClock(datetime(2025, 5, 15, 12, 0, 0, tzinfo=timezone.utc))


# ---------------------------------------------------------------------------
# Sample records
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_appointments():
    return (
        RawAppointment("accepted", "Cardiology"),
        RawAppointment("Accepted", "Dermatologist"),
        RawAppointment("accepted", "General Physician"),
        RawAppointment("pending", "Cardiology"),
        RawAppointment("rejected", "Neurology"),
        RawAppointment("accepted", "Radiology"),
    )


@pytest.fixture
def sample_bundle(sample_appointments):
    """
    Bundle with known totals.

    revenue   = 6000 + 5500 + 4000 + 5000          = 20500
    payroll   = 100000 + 5000 + 12000 + 3000
              + 50000 + 0 + 6000 + 1500            = 177500
    stock     = 100 x 10 + 250.50 x 4              = 2002
    restock   = 1500
    utilities = 1200 + 800                         = 2000
    suppliers = 3000 + 4500                        = 7500
    expenses  = 177500 + 3502 + 2000 + 7500        = 190502
    """
    return RawSourceBundle(
        appointments=sample_appointments,
        payroll=(
            RawPayrollRecord("E1", Decimal("100000"), Decimal("5000")),
            RawPayrollRecord("E2", Decimal("50000"), Decimal("0")),
        ),
        inventory=(
            RawInventoryItem(Decimal("100"), 10),
            RawInventoryItem(Decimal("250.50"), 4),
        ),
        restock_summary=RestockSummary(Decimal("1500")),
        utilities=(RawUtilityBill(Decimal("1200")), RawUtilityBill(Decimal("800"))),
        purchase_orders=(RawPurchaseOrder(Decimal("3000")), RawPurchaseOrder(Decimal("4500"))),
    )


@pytest.fixture
def snapshot_factory(clock):
    """Build a snapshot from a bundle with a fixed seed."""
    builder = SnapshotBuilder(clock)
    revenue_calculator = RevenueCalculator()
    expense_calculator = ExpenseCalculator()

    def _build(bundle: RawSourceBundle, seed: int = 42):
        return builder.build(
            revenue_calculator.compute_revenue(bundle.appointments),
            expense_calculator.compute_expenses(bundle),
            seed=seed,
            unavailable=bundle.unavailable,
        )

    return _build


@pytest.fixture
def sample_snapshot(snapshot_factory, sample_bundle):
    return snapshot_factory(sample_bundle)


@pytest.fixture
def plan_store(clock):
    return BudgetPlanStore(clock=clock)
