"""
healx_ingestion.gateway -- Concurrent fetch of all operational sources.

Responsibility:
    One ``refresh()`` pulls the six sources concurrently, one task per
    source, and waits for all of them to settle.  Each task writes only its
    own result slot.  A failing source degrades only its own category: it
    contributes an empty collection and is listed as unavailable on the
    bundle.  With a ``timeout`` the caller may abandon slow sources; their
    results are discarded and they are reported unavailable.

Architecture position:
    Ingestion -- the only component that performs source I/O (through its
    adapters).  Produces a ``RawSourceBundle`` for the engines.

Failure modes:
    None propagate.  ``SourceUnavailableError`` and any other adapter error
    are logged as ``source_fetch_failed``.
"""

from __future__ import annotations

import contextvars
import time
from collections.abc import Mapping
from concurrent.futures import ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any
from uuid import uuid4

import requests

from healx_ingestion.adapters import SourceAdapter, build_adapter
from healx_ingestion.domain.types import FetchOutcome, SourceEndpoint
from healx_ingestion.mapping import map_bundle
from healx_kernel.domain.records import RawSourceBundle, SourceKind
from healx_kernel.logging_config import LogContext, get_logger

logger = get_logger("ingestion.gateway")


class SourceGateway:
    """Fans a refresh out over the configured source adapters."""

    def __init__(self, adapters: Mapping[SourceKind, SourceAdapter]):
        self.adapters = dict(adapters)

    @classmethod
    def from_endpoints(
        cls,
        endpoints: Mapping[SourceKind, SourceEndpoint],
        session: requests.Session | None = None,
    ) -> SourceGateway:
        session = session or requests.Session()
        return cls({kind: build_adapter(kind, ep, session) for kind, ep in endpoints.items()})

    def refresh(self, timeout: float | None = None) -> RawSourceBundle:
        """
        Fetch every source and map the results into one bundle.

        Args:
            timeout: Seconds to wait for all sources.  None waits until
                every source has settled.
        """
        refresh_id = str(uuid4())
        with LogContext.bind(refresh_id=refresh_id):
            outcomes = self._fetch_all(timeout)

        records = {kind: o.records for kind, o in outcomes.items() if o.ok}
        unavailable = [kind for kind in SourceKind if not outcomes[kind].ok]
        bundle = map_bundle(records, unavailable)

        logger.info(
            "source_refresh_completed",
            extra={
                "refresh_id": refresh_id,
                "record_counts": {kind.value: len(o.records) for kind, o in outcomes.items()},
                "unavailable": [kind.value for kind in bundle.unavailable],
            },
        )
        return bundle

    def _fetch_all(self, timeout: float | None) -> dict[SourceKind, FetchOutcome]:
        outcomes: dict[SourceKind, FetchOutcome] = {}
        for kind in SourceKind:
            if kind not in self.adapters:
                logger.warning("source_not_configured", extra={"source": kind.value})
                outcomes[kind] = FetchOutcome(kind=kind, error="not configured")

        pending = {k: a for k, a in self.adapters.items() if k not in outcomes}
        if not pending:
            return outcomes

        executor = ThreadPoolExecutor(max_workers=len(pending), thread_name_prefix="healx-source")
        try:
            futures: dict[Future, SourceKind] = {
                executor.submit(contextvars.copy_context().run, _fetch_one, kind, adapter): kind
                for kind, adapter in pending.items()
            }
            done, not_done = wait(futures, timeout=timeout, return_when=ALL_COMPLETED)
            for future in done:
                kind = futures[future]
                outcomes[kind] = future.result()
            for future in not_done:
                kind = futures[future]
                logger.warning(
                    "source_fetch_abandoned",
                    extra={"source": kind.value, "timeout_seconds": timeout},
                )
                outcomes[kind] = FetchOutcome(kind=kind, error="timed out")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return outcomes


def _fetch_one(kind: SourceKind, adapter: SourceAdapter) -> FetchOutcome:
    t0 = time.monotonic()
    try:
        rows: list[dict[str, Any]] = adapter.fetch()
    except Exception as exc:
        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.warning(
            "source_fetch_failed",
            extra={
                "source": kind.value,
                "error_code": getattr(exc, "code", type(exc).__name__),
                "reason": str(exc),
                "duration_ms": duration_ms,
            },
        )
        return FetchOutcome(kind=kind, error=str(exc), duration_ms=duration_ms)

    duration_ms = round((time.monotonic() - t0) * 1000, 2)
    logger.debug(
        "source_fetched",
        extra={"source": kind.value, "records": len(rows), "duration_ms": duration_ms},
    )
    return FetchOutcome(kind=kind, records=tuple(rows), duration_ms=duration_ms)
