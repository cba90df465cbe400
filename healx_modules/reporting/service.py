"""
Reporting Service (``healx_modules.reporting.service``).

Responsibility
--------------
``ReportRenderer`` renders a snapshot and a budget plan into one of three
formats and optionally writes the artifact to a directory as
``{stem}_{YYYY-MM-DD}.{ext}``, the date taken from the injected clock.

Architecture position
---------------------
**Modules layer** -- assembly is delegated to the pure functions in
``statements``; byte rendering to ``renderers``.

Failure modes
-------------
* ``UnsupportedReportFormatError`` -- unknown format name.
* ``RenderTargetUnavailableError`` -- target directory missing or not
  writable.  Nothing is left behind on failure.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from healx_engines.snapshot import FinancialSnapshot
from healx_engines.variance import VarianceAnalyzer
from healx_kernel.domain.clock import Clock, SystemClock
from healx_kernel.exceptions import RenderTargetUnavailableError
from healx_kernel.logging_config import get_logger
from healx_modules.budget.models import BudgetPlan
from healx_modules.reporting.config import ReportingConfig
from healx_modules.reporting.models import FinancialReport, RenderedReport, ReportFormat
from healx_modules.reporting.renderers import (
    HTML_MEDIA_TYPE,
    JSON_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    render_html,
    render_json,
    render_xlsx,
)
from healx_modules.reporting.statements import build_report

logger = get_logger("modules.reporting.service")

_RENDERERS: dict[ReportFormat, tuple[Callable[[FinancialReport], bytes], str, str]] = {
    ReportFormat.STRUCTURED_DOCUMENT: (render_html, HTML_MEDIA_TYPE, "html"),
    ReportFormat.TABULAR: (render_xlsx, XLSX_MEDIA_TYPE, "xlsx"),
    ReportFormat.RAW: (render_json, JSON_MEDIA_TYPE, "json"),
}


class ReportRenderer:
    """Renders and exports financial reports."""

    def __init__(
        self,
        config: ReportingConfig | None = None,
        clock: Clock | None = None,
        analyzer: VarianceAnalyzer | None = None,
    ):
        self._config = config or ReportingConfig.with_defaults()
        self._clock = clock or SystemClock()
        self._analyzer = analyzer or VarianceAnalyzer()

    def build(self, snapshot: FinancialSnapshot, plan: BudgetPlan | None) -> FinancialReport:
        return build_report(snapshot, plan, self._config, self._clock.now(), self._analyzer)

    def render(
        self,
        snapshot: FinancialSnapshot,
        plan: BudgetPlan | None,
        fmt: ReportFormat | str,
    ) -> RenderedReport:
        fmt = ReportFormat.parse(fmt)
        render, media_type, extension = _RENDERERS[fmt]
        content = render(self.build(snapshot, plan))
        logger.info("report_rendered", extra={
            "format": fmt.value,
            "plan_id": str(plan.id) if plan is not None else None,
            "bytes": len(content),
        })
        return RenderedReport(content=content, media_type=media_type, extension=extension, fmt=fmt)

    def export(
        self,
        snapshot: FinancialSnapshot,
        plan: BudgetPlan | None,
        fmt: ReportFormat | str,
        target_dir: Path | str,
        stem: str = "financial_report",
    ) -> Path:
        """
        Render and write the report; returns the written path.

        The file is written to a temporary name in ``target_dir`` and moved
        into place, so a failed export leaves no partial file.
        """
        rendered = self.render(snapshot, plan, fmt)
        directory = Path(target_dir)
        target = directory / f"{stem}_{self._clock.today().isoformat()}.{rendered.extension}"

        if not directory.is_dir():
            raise RenderTargetUnavailableError(str(directory), "directory does not exist")

        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{stem}_", suffix=".tmp")
            with os.fdopen(fd, "wb") as handle:
                handle.write(rendered.content)
            os.replace(tmp_name, target)
            tmp_name = None
        except OSError as exc:
            raise RenderTargetUnavailableError(str(target), str(exc)) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.info("report_exported", extra={
            "format": rendered.fmt.value,
            "path": str(target),
            "bytes": len(rendered.content),
        })
        return target
