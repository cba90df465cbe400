"""
Configuration Schema (``healx_config.schema``).

Responsibility
--------------
The typed root of the runtime configuration.  Each section is the config
type owned by the component that consumes it; ``EngineConfig`` only groups
them with the source endpoints and the plan database URL.

Architecture position
---------------------
**Config layer** -- sits above the engines, ingestion and modules whose
config types it assembles, and below ``healx_services``.

Invariants enforced
-------------------
* ``EngineConfig`` is frozen; section objects validate themselves on
  construction.
* ``sources`` is keyed by ``SourceKind``; unknown kinds never reach it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Self

from healx_engines.expense import PayrollRates
from healx_engines.snapshot import TrendConfig
from healx_ingestion.domain.types import SourceEndpoint
from healx_kernel.domain.records import SourceKind
from healx_modules.budget.config import BudgetConfig
from healx_modules.reporting.config import ReportingConfig

DEFAULT_DATABASE_URL = "sqlite:///healx_plans.db"


@dataclass(frozen=True)
class EngineConfig:
    """Root configuration object returned by ``get_active_config()``."""

    payroll: PayrollRates = field(default_factory=PayrollRates)
    trend: TrendConfig = field(default_factory=TrendConfig)
    budget: BudgetConfig = field(default_factory=BudgetConfig)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    sources: dict[SourceKind, SourceEndpoint] = field(default_factory=dict)
    database_url: str = DEFAULT_DATABASE_URL
    refresh_timeout_seconds: float | None = None
    checksum: str = ""

    def __post_init__(self) -> None:
        if self.refresh_timeout_seconds is not None and self.refresh_timeout_seconds <= 0:
            raise ValueError("refresh_timeout_seconds must be positive when set")

    @classmethod
    def with_defaults(cls) -> Self:
        return cls()
