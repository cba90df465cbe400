"""
healx_ingestion.domain.types -- Pure frozen dataclasses for source ingestion.

ZERO I/O.  Imports only from healx_kernel.domain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from healx_kernel.domain.records import SourceKind


class SourceTransport(str, Enum):
    """How a source is reached."""

    HTTP = "http"
    FILE = "file"


@dataclass(frozen=True)
class SourceEndpoint:
    """
    Where one operational source lives and how its payload is shaped.

    ``records_path`` is a dot-separated path into the response body
    (``"data.items"``); empty means the body itself is the record list.
    Paginated sources are walked with ``page``/``limit`` query parameters.
    """

    location: str
    transport: SourceTransport = SourceTransport.HTTP
    records_path: str = ""
    paginated: bool = False
    page_size: int = 1000
    timeout_seconds: float = 10.0
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.location or not str(self.location).strip():
            raise ValueError("Source endpoint location must not be empty")
        if not isinstance(self.transport, SourceTransport):
            object.__setattr__(self, "transport", SourceTransport(self.transport))
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {self.timeout_seconds}")


@dataclass(frozen=True)
class FetchOutcome:
    """Result of fetching one source during a refresh."""

    kind: SourceKind
    records: tuple[dict[str, Any], ...] = ()
    error: str | None = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None
