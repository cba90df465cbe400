"""Source adapters: HTTP (requests) and JSON files."""

from __future__ import annotations

import requests

from healx_ingestion.adapters.base import SourceAdapter, extract_records, get_nested
from healx_ingestion.adapters.http_adapter import HttpSourceAdapter
from healx_ingestion.adapters.json_adapter import JsonFileSourceAdapter
from healx_ingestion.domain.types import SourceEndpoint, SourceTransport
from healx_kernel.domain.records import SourceKind


def build_adapter(
    kind: SourceKind,
    endpoint: SourceEndpoint,
    session: requests.Session | None = None,
) -> SourceAdapter:
    """Adapter for an endpoint according to its transport."""
    if endpoint.transport is SourceTransport.FILE:
        return JsonFileSourceAdapter(kind, endpoint.location, endpoint.records_path)
    return HttpSourceAdapter(kind, endpoint, session=session)


__all__ = [
    "HttpSourceAdapter",
    "JsonFileSourceAdapter",
    "SourceAdapter",
    "build_adapter",
    "extract_records",
    "get_nested",
]
