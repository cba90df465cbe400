"""
Typed exception hierarchy for the Heal-x finance engine.

Every error has a typed class (catch by type, not message), a ``code``
attribute (machine-readable, API-safe) and structured data attributes.

    HealxError (base)
    |
    +-- SourceError
    |   +-- SourceUnavailableError
    |
    +-- PlanError
    |   +-- InvalidPlanInputError
    |   +-- PlanNotFoundError
    |
    +-- CalculationError
    |   +-- SnapshotInvariantError
    |
    +-- ReportError
        +-- RenderTargetUnavailableError
        +-- UnsupportedReportFormatError

Category     | Code                          | When Raised
-------------|-------------------------------|-----------------------------------------
Source       | SOURCE_UNAVAILABLE            | A raw source could not be fetched/parsed
Plan         | INVALID_PLAN_INPUT            | Plan form rejected before generation
             | PLAN_NOT_FOUND                | Unknown plan id
Calculation  | SNAPSHOT_INVARIANT_VIOLATED   | Snapshot totals do not reconcile
Report       | RENDER_TARGET_UNAVAILABLE     | Export sink cannot be written
             | UNSUPPORTED_REPORT_FORMAT     | Unknown report format requested

SourceUnavailableError is recovered inside the gateway (the category degrades
to an empty collection).  Everything else propagates to the caller.
"""


class HealxError(Exception):
    """
    Base exception for all Heal-x engine errors.

    All subclasses must have a `code` class attribute.
    """

    code: str = "HEALX_ERROR"


# Source-related exceptions


class SourceError(HealxError):
    """Base exception for raw-source errors."""

    code: str = "SOURCE_ERROR"


class SourceUnavailableError(SourceError):
    """A raw record source failed (transport, HTTP status or payload)."""

    code: str = "SOURCE_UNAVAILABLE"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Source '{source}' unavailable: {reason}")


# Plan-related exceptions


class PlanError(HealxError):
    """Base exception for budget plan errors."""

    code: str = "PLAN_ERROR"


class InvalidPlanInputError(PlanError):
    """Plan form input rejected; no quarter was generated."""

    code: str = "INVALID_PLAN_INPUT"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid plan input '{field}': {reason}")


class PlanNotFoundError(PlanError):
    """Budget plan with given id was not found."""

    code: str = "PLAN_NOT_FOUND"

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"Budget plan not found: {plan_id}")


# Calculation exceptions


class CalculationError(HealxError):
    """Base exception for calculation bugs (never raised for bad data)."""

    code: str = "CALCULATION_ERROR"


class SnapshotInvariantError(CalculationError):
    """A snapshot's derived totals do not reconcile with its components."""

    code: str = "SNAPSHOT_INVARIANT_VIOLATED"

    def __init__(self, invariant: str, expected: str, actual: str):
        self.invariant = invariant
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Snapshot invariant '{invariant}' violated: "
            f"expected {expected}, got {actual}"
        )


# Report exceptions


class ReportError(HealxError):
    """Base exception for report rendering/export errors."""

    code: str = "REPORT_ERROR"


class RenderTargetUnavailableError(ReportError):
    """The export sink could not be written."""

    code: str = "RENDER_TARGET_UNAVAILABLE"

    def __init__(self, target: str, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(f"Cannot write report to {target}: {reason}")


class UnsupportedReportFormatError(ReportError):
    """Requested report format is not one of the supported formats."""

    code: str = "UNSUPPORTED_REPORT_FORMAT"

    def __init__(self, fmt: str):
        self.fmt = fmt
        super().__init__(f"Unsupported report format: {fmt}")
