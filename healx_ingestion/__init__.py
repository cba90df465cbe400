"""
Heal-x source ingestion.

Adapters pull raw records from the hospital back office (HTTP or JSON
files); the gateway fetches all sources concurrently and maps them into a
``RawSourceBundle``.
"""

from healx_ingestion.adapters import HttpSourceAdapter, JsonFileSourceAdapter, build_adapter
from healx_ingestion.domain.types import FetchOutcome, SourceEndpoint, SourceTransport
from healx_ingestion.gateway import SourceGateway
from healx_ingestion.mapping import map_bundle

__all__ = [
    "FetchOutcome",
    "HttpSourceAdapter",
    "JsonFileSourceAdapter",
    "SourceEndpoint",
    "SourceGateway",
    "SourceTransport",
    "build_adapter",
    "map_bundle",
]
