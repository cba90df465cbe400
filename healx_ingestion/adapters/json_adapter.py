"""
JSON file source adapter.

Reads a source from a local JSON document, either a bare array of records
or an envelope addressed by ``records_path``.  Used for offline runs and
fixtures captured from the live endpoints.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from healx_ingestion.adapters.base import extract_records
from healx_kernel.domain.records import SourceKind
from healx_kernel.exceptions import SourceUnavailableError


class JsonFileSourceAdapter:
    """Fetches one source from a JSON file."""

    def __init__(self, kind: SourceKind, path: Path | str, records_path: str = ""):
        self.kind = kind
        self.path = Path(path)
        self.records_path = records_path

    def fetch(self) -> list[dict[str, Any]]:
        try:
            with open(self.path, encoding="utf-8") as f:
                payload = json.load(f)
        except OSError as exc:
            raise SourceUnavailableError(self.kind.value, f"cannot read {self.path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise SourceUnavailableError(self.kind.value, f"invalid JSON in {self.path}: {exc}") from exc

        records = extract_records(payload, self.records_path)
        if records is None:
            raise SourceUnavailableError(
                self.kind.value,
                f"no records at path '{self.records_path or '<root>'}' in {self.path}",
            )
        return records
