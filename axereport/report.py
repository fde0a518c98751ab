"""Report aggregation: read every record in a store and render one document."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from .breakdown import RecordSummary, ReportSummary, summarize
from .config import ReportSettings
from .errors import RecordParseError, StoreMissingError
from .render import HtmlReportRenderer, ReportRenderer
from .storage import ResultsStore
from .tracing import log_event, trace

STATUS_WRITTEN = "written"
STATUS_EMPTY = "empty"

_LOGGER = logging.getLogger("report")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ReportOutcome:
    """Result of one report run."""

    status: str
    summary: ReportSummary
    report_path: Optional[Path] = None

    @property
    def written(self) -> bool:
        return self.status == STATUS_WRITTEN


class ReportGenerator:
    """Aggregate every ``-results.json`` record in ``store`` into one report."""

    def __init__(
        self,
        store: ResultsStore,
        renderer: Optional[ReportRenderer] = None,
        *,
        skip_invalid: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.renderer = renderer or HtmlReportRenderer()
        self.skip_invalid = skip_invalid
        self._clock = clock

    def collect(self) -> Optional[ReportSummary]:
        """Load and summarise the store; ``None`` when it holds no records."""

        if not self.store.exists():
            raise StoreMissingError(self.store.root)

        files = self.store.list_record_files()
        if not files:
            return None
        log_event(_LOGGER, logging.INFO, "report.records.found", count=len(files))

        records: List[RecordSummary] = []
        skipped: List[Path] = []
        for path in files:
            try:
                record = self.store.load_record(path)
            except RecordParseError as exc:
                if not self.skip_invalid:
                    raise
                log_event(
                    _LOGGER,
                    logging.WARNING,
                    "report.record.skipped",
                    path=str(path),
                    reason=exc.reason,
                )
                skipped.append(path)
                continue
            modified_at = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
            records.append(RecordSummary.from_record(record, path, modified_at))
        return summarize(records, skipped)

    def render(self, summary: ReportSummary) -> str:
        return self.renderer.render(summary, self._clock())

    def generate(self) -> ReportOutcome:
        """Run the whole aggregation and write the report into the store."""

        with trace("report.generate", logger=_LOGGER, store=str(self.store.root)) as span:
            log_event(_LOGGER, logging.INFO, "report.scan.start", store=str(self.store.root))
            summary = self.collect()
            if summary is None:
                log_event(_LOGGER, logging.WARNING, "report.empty", message="No accessibility test results found.")
                return ReportOutcome(status=STATUS_EMPTY, summary=summarize([]))
            span.note(records=summary.record_count, skipped=len(summary.skipped))

            document = self.render(summary)
            report_path = self.store.write_text(self.store.report_path, document)
            log_event(_LOGGER, logging.INFO, "report.written", path=str(report_path))
            log_event(
                _LOGGER,
                logging.INFO,
                "report.summary",
                message=(
                    f"{summary.record_count} tests, {summary.total_violations} violations, "
                    f"{summary.total_passed} passed checks"
                ),
                records=summary.record_count,
                violations=summary.total_violations,
                passed=summary.total_passed,
                skipped=len(summary.skipped),
            )
            return ReportOutcome(status=STATUS_WRITTEN, summary=summary, report_path=report_path)


def generate_report(
    settings: Optional[ReportSettings] = None,
    renderer: Optional[ReportRenderer] = None,
) -> ReportOutcome:
    """Convenience wrapper building the store from ``settings``."""

    settings = settings or ReportSettings.load()
    store = ResultsStore(settings.results_dir, settings.report_filename)
    generator = ReportGenerator(store, renderer, skip_invalid=settings.skip_invalid)
    return generator.generate()


__all__ = ["ReportGenerator", "ReportOutcome", "STATUS_EMPTY", "STATUS_WRITTEN", "generate_report"]
