"""
Source adapter protocol and payload helpers.

Contract:
    SourceAdapter.fetch() returns one dict per source record.  Any transport
    or payload failure is raised as SourceUnavailableError; the gateway
    decides what a failure means for the refresh.

Architecture: healx_ingestion/adapters.  Network or file I/O only, no DB.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from healx_kernel.domain.records import SourceKind


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for pulling the records of one operational source."""

    kind: SourceKind

    def fetch(self) -> list[dict[str, Any]]:
        """Return every record of the source."""
        ...


def get_nested(data: Any, path: str) -> Any:
    """Follow dot-separated path into dict/list. Returns None if key missing."""
    if not path or not path.strip():
        return data
    for key in path.split("."):
        key = key.strip()
        if not key:
            continue
        if isinstance(data, list):
            try:
                data = data[int(key)]
            except (ValueError, IndexError):
                return None
        elif isinstance(data, dict) and key in data:
            data = data[key]
        else:
            return None
    return data


def extract_records(payload: Any, records_path: str = "") -> list[dict[str, Any]] | None:
    """
    Unwrap the record list from a response body.

    A bare list body is used as-is even when a path is configured; a
    single object at ``records_path`` (a pre-aggregated summary) becomes a
    one-element list.  Non-dict items are dropped.  Returns None when
    nothing usable sits at the path.
    """
    root = get_nested(payload, records_path)
    if root is None and isinstance(payload, list):
        root = payload
    if isinstance(root, dict):
        return [root]
    if not isinstance(root, list):
        return None
    return [item for item in root if isinstance(item, dict)]
