"""
healx_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns an ``EngineConfig`` assembled from a
    YAML document: payroll rates, trend and planning jitter bounds, source
    endpoints, reporting options and the plan database URL.

Architecture position:
    Configuration -- sits above ``healx_kernel``, the engines, ingestion
    and modules (whose config types it assembles) and below
    ``healx_services``.

Resolution order:
    1. explicit ``path`` argument
    2. ``HEALX_CONFIG_PATH`` environment variable
    3. bundled ``healx_config/sets/default.yaml``

Failure modes:
    - ``FileNotFoundError`` -- the resolved file does not exist.
    - ``ValueError`` / ``KeyError`` -- schema or structural errors.
    - ``yaml.YAMLError`` -- malformed YAML.

Every successful call emits a ``HEALX_CONFIG_TRACE`` log entry with the
resolved path and the document checksum.
"""

from __future__ import annotations

import os
from pathlib import Path

from healx_config.loader import compute_checksum, load_engine_config, load_yaml_file
from healx_config.schema import EngineConfig
from healx_kernel.logging_config import get_logger

_logger = get_logger("config")

CONFIG_PATH_ENV = "HEALX_CONFIG_PATH"

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def resolve_config_path(path: Path | str | None = None) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    return _DEFAULT_CONFIG_PATH


def get_active_config(path: Path | str | None = None) -> EngineConfig:
    """The ONLY public configuration entrypoint.

    Guarantees:
        - The returned ``EngineConfig`` has passed section validation.
        - A ``HEALX_CONFIG_TRACE`` log entry is emitted on every
          successful call.

    Non-goals:
        - No caching across calls; callers hold the returned config.
    """
    resolved = resolve_config_path(path)
    config = load_engine_config(resolved)

    _logger.info(
        "HEALX_CONFIG_TRACE",
        extra={
            "trace_type": "HEALX_CONFIG_TRACE",
            "config_path": str(resolved),
            "checksum": config.checksum,
            "source_count": len(config.sources),
            "database_backend": config.database_url.split(":", 1)[0],
        },
    )
    return config


__all__ = [
    "CONFIG_PATH_ENV",
    "EngineConfig",
    "compute_checksum",
    "get_active_config",
    "load_yaml_file",
    "resolve_config_path",
]
