"""
Reporting Configuration Schema.

Report header, currency label and the fixed authorization block printed
at the end of the structured document.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any, Self

from healx_kernel.logging_config import get_logger

logger = get_logger("modules.reporting.config")


@dataclass
class ReportingConfig:
    """Configuration schema for report rendering."""

    entity_name: str = "Heal-x Healthcare"
    report_title: str = "Financial Report"
    currency: str = "LKR"
    signatory_title: str = "Financial Manager"
    organization: str = "Heal-x Healthcare Management"
    date_line: str = "Date: _______________"
    approval_label: str = "Report Approved On"
    seal_lines: tuple[str, ...] = ("HEAL-X OFFICIAL SEAL", "HEALTHCARE MANAGEMENT SYSTEM")
    footer: str = (
        "This is a system-generated report from Heal-x Healthcare Management System. "
        "All amounts are in Sri Lankan Rupees (LKR)."
    )
    trend_note: str = (
        "Monthly trend is illustrative: synthesized from annual totals with "
        "random variation, not observed monthly data."
    )

    def __post_init__(self):
        if not self.entity_name.strip():
            raise ValueError("entity_name must not be blank")
        if not self.currency.strip():
            raise ValueError("currency must not be blank")
        self.seal_lines = tuple(self.seal_lines)
        logger.info("reporting_config_initialized", extra={
            "entity_name": self.entity_name,
            "currency": self.currency,
        })

    @classmethod
    def with_defaults(cls) -> Self:
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Build from a parsed ``reporting`` config section; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown reporting config keys: {sorted(unknown)}")
        return cls(**dict(data))
