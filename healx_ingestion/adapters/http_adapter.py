"""
HTTP source adapter (requests).

Pulls JSON records from an HTTP endpoint of the hospital back office.
Responses are either a bare JSON array or an envelope such as
``{"success": true, "data": {"items": [...], "pagination": {...}}}``; the
endpoint's ``records_path`` names where the records sit.

Paginated endpoints are walked page by page with ``page``/``limit`` query
parameters until a short page, an empty page, or the advertised
``pagination.totalPages`` is reached.  A walk never returns partial or
duplicated data: more than ``MAX_PAGES`` pages, or a page that repeats the
previous one (a server ignoring ``page``), fails the source.
"""

from __future__ import annotations

from typing import Any

import requests

from healx_ingestion.adapters.base import extract_records, get_nested
from healx_ingestion.domain.types import SourceEndpoint
from healx_kernel.domain.records import SourceKind
from healx_kernel.exceptions import SourceUnavailableError
from healx_kernel.logging_config import get_logger

logger = get_logger("ingestion.http")

MAX_PAGES = 500

_TOTAL_PAGES_PATHS = ("pagination.totalPages", "data.pagination.totalPages", "totalPages")


class HttpSourceAdapter:
    """Fetches one source over HTTP."""

    def __init__(
        self,
        kind: SourceKind,
        endpoint: SourceEndpoint,
        session: requests.Session | None = None,
    ):
        self.kind = kind
        self.endpoint = endpoint
        self.session = session or requests.Session()

    def fetch(self) -> list[dict[str, Any]]:
        if not self.endpoint.paginated:
            payload = self._get(dict(self.endpoint.params))
            return self._records(payload)

        records: list[dict[str, Any]] = []
        previous: list[dict[str, Any]] | None = None
        page = 1
        while True:
            if page > MAX_PAGES:
                raise SourceUnavailableError(
                    self.kind.value, f"more than {MAX_PAGES} pages; refusing a partial result",
                )
            params = {
                **self.endpoint.params,
                "page": page,
                "limit": self.endpoint.page_size,
            }
            payload = self._get(params)
            batch = self._records(payload)
            if batch and batch == previous:
                raise SourceUnavailableError(
                    self.kind.value, f"page {page} repeats page {page - 1}; 'page' parameter ignored",
                )
            records.extend(batch)

            total_pages = _total_pages(payload)
            if not batch or len(batch) < self.endpoint.page_size:
                break
            if total_pages is not None and page >= total_pages:
                break
            previous = batch
            page += 1

        logger.debug(
            "source_pages_walked",
            extra={"source": self.kind.value, "pages": page, "records": len(records)},
        )
        return records

    def _get(self, params: dict[str, Any]) -> Any:
        try:
            response = self.session.get(
                self.endpoint.location,
                params=params or None,
                timeout=self.endpoint.timeout_seconds,
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raise SourceUnavailableError(self.kind.value, str(exc)) from exc
        except ValueError as exc:
            raise SourceUnavailableError(self.kind.value, f"invalid JSON body: {exc}") from exc

    def _records(self, payload: Any) -> list[dict[str, Any]]:
        records = extract_records(payload, self.endpoint.records_path)
        if records is None:
            raise SourceUnavailableError(
                self.kind.value,
                f"no records at path '{self.endpoint.records_path or '<root>'}'",
            )
        return records


def _total_pages(payload: Any) -> int | None:
    for path in _TOTAL_PAGES_PATHS:
        value = get_nested(payload, path)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None
