"""Pure ingestion types (zero I/O)."""

from healx_ingestion.domain.types import FetchOutcome, SourceEndpoint, SourceTransport

__all__ = ["FetchOutcome", "SourceEndpoint", "SourceTransport"]
