"""
Configuration Loader (``healx_config.loader``).

Responsibility
--------------
Load a YAML configuration file and parse each section into the typed
config objects of ``healx_config.schema``.  The single public entry point
for runtime config is ``healx_config.get_active_config()``.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages.  Absent optional sections keep their defaults.
* Source sections are keyed by known ``SourceKind`` values only.
* HTTP endpoints of the item-list sources (payroll, inventory, utilities)
  are paginated and leave ``page``/``limit`` to the page walker.
* ``compute_checksum`` is a deterministic SHA-256 of the parsed document.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown source kind or section key  -> ``ValueError``.
* Unpaginated HTTP item-list source  -> ``ValueError``.
* Jitter bounds outside ``0 < low <= high``  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from healx_config.schema import DEFAULT_DATABASE_URL, EngineConfig
from healx_engines.expense import PayrollRates
from healx_engines.snapshot import TrendConfig
from healx_ingestion.domain.types import SourceEndpoint, SourceTransport
from healx_kernel.domain.jitter import JitterBounds
from healx_kernel.domain.records import SourceKind
from healx_modules.budget.config import BudgetConfig
from healx_modules.reporting.config import ReportingConfig

_SECTIONS = frozenset({
    "payroll", "trend", "planning", "sources", "reporting",
    "database_url", "refresh_timeout_seconds",
})

_PAGED_SOURCES = frozenset({SourceKind.PAYROLL, SourceKind.INVENTORY, SourceKind.UTILITIES})

_PAGE_PARAMS = frozenset({"page", "limit"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 checksum of a parsed configuration document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_bounds(data: dict[str, Any]) -> JitterBounds:
    return JitterBounds.of(data["low"], data["high"])


def parse_payroll(data: dict[str, Any]) -> PayrollRates:
    return PayrollRates(
        epf_rate=Decimal(str(data.get("epf_rate", "0.12"))),
        etf_rate=Decimal(str(data.get("etf_rate", "0.03"))),
    )


def parse_trend(data: dict[str, Any]) -> TrendConfig:
    defaults = TrendConfig()
    return TrendConfig(
        revenue=parse_bounds(data["revenue"]) if "revenue" in data else defaults.revenue,
        expenses=parse_bounds(data["expenses"]) if "expenses" in data else defaults.expenses,
    )


def parse_source(data: dict[str, Any]) -> SourceEndpoint:
    if "url" in data and "path" in data:
        raise ValueError("A source takes either 'url' or 'path', not both")
    if "path" in data:
        location, transport = data["path"], SourceTransport.FILE
    else:
        location, transport = data["url"], SourceTransport.HTTP
    return SourceEndpoint(
        location=str(location),
        transport=transport,
        records_path=str(data.get("records_path", "")),
        paginated=bool(data.get("paginated", False)),
        page_size=int(data.get("page_size", 1000)),
        timeout_seconds=float(data.get("timeout_seconds", 10.0)),
        params=dict(data.get("params") or {}),
    )


def parse_sources(data: dict[str, Any]) -> dict[SourceKind, SourceEndpoint]:
    known = {kind.value: kind for kind in SourceKind}
    sources: dict[SourceKind, SourceEndpoint] = {}
    for name, section in data.items():
        kind = known.get(name)
        if kind is None:
            raise ValueError(f"Unknown source kind '{name}'; expected one of {sorted(known)}")
        endpoint = parse_source(section)
        if kind in _PAGED_SOURCES and endpoint.transport is SourceTransport.HTTP:
            if not endpoint.paginated:
                raise ValueError(
                    f"Source '{name}' returns an item list over HTTP and must set 'paginated: true'"
                )
            if _PAGE_PARAMS & set(endpoint.params):
                raise ValueError(
                    f"Source '{name}' is paginated; set 'page_size' instead of page/limit params"
                )
        sources[kind] = endpoint
    return sources


def parse_engine_config(data: dict[str, Any], checksum: str = "") -> EngineConfig:
    """Parse a whole configuration document into an ``EngineConfig``."""
    unknown = set(data) - _SECTIONS
    if unknown:
        raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")

    timeout = data.get("refresh_timeout_seconds")
    return EngineConfig(
        payroll=parse_payroll(data.get("payroll") or {}),
        trend=parse_trend(data.get("trend") or {}),
        budget=BudgetConfig.from_dict(data.get("planning") or {}),
        reporting=ReportingConfig.from_dict(data.get("reporting") or {}),
        sources=parse_sources(data.get("sources") or {}),
        database_url=str(data.get("database_url") or DEFAULT_DATABASE_URL),
        refresh_timeout_seconds=float(timeout) if timeout is not None else None,
        checksum=checksum,
    )


def load_engine_config(path: Path) -> EngineConfig:
    data = load_yaml_file(path)
    return parse_engine_config(data, checksum=compute_checksum(data))
