"""Scan recorder: run the oracle against a page and persist the outcome."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Protocol, Sequence, Union

from .config import ReportSettings
from .models import ScanOptions, ScanRecord
from .scanner import DEFAULT_TAGS, AxeScanner
from .storage import ResultsStore, isoformat_utc
from .tracing import log_event

if TYPE_CHECKING:
    from playwright.sync_api import Page

DEFAULT_TEST_NAME = "accessibility-test"

_LOGGER = logging.getLogger("recorder")


class Scanner(Protocol):
    def analyze(
        self,
        page: Any,
        *,
        tags: Sequence[str] = ...,
        include: Optional[Sequence[str]] = ...,
        exclude: Optional[Sequence[str]] = ...,
    ) -> Dict[str, Any]:
        ...


OptionsLike = Union[ScanOptions, Mapping[str, Any], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_options(options: OptionsLike) -> ScanOptions:
    if options is None:
        return ScanOptions()
    if isinstance(options, ScanOptions):
        return options
    return ScanOptions.model_validate(dict(options))


class ScanRecorder:
    """Capture a screenshot, the DOM and an axe result for one test step."""

    def __init__(
        self,
        store: ResultsStore,
        scanner: Optional[Scanner] = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.scanner = scanner or AxeScanner()
        self._clock = clock

    def record(self, page: "Page", options: OptionsLike = None) -> Dict[str, Any]:
        """Scan ``page`` and write its record; returns the oracle's raw result."""

        scan_options = coerce_options(options)
        test_name = scan_options.test_name or DEFAULT_TEST_NAME
        stem = self.store.stem_for(test_name, self._clock())
        log_event(_LOGGER, logging.INFO, "recorder.start", test_name=test_name, stem=stem)

        self.store.ensure()

        screenshot_path = self.store.screenshot_path(stem)
        page.screenshot(path=str(screenshot_path), full_page=True)
        log_event(_LOGGER, logging.INFO, "recorder.screenshot.saved", path=str(screenshot_path))

        html_path = self.store.write_text(self.store.page_content_path(stem), page.content())
        log_event(_LOGGER, logging.INFO, "recorder.page_content.saved", path=str(html_path))

        results = self.scanner.analyze(
            page,
            tags=scan_options.tags if scan_options.tags is not None else DEFAULT_TAGS,
            include=scan_options.include,
            exclude=scan_options.exclude,
        )

        record = ScanRecord.model_validate(
            {
                "timestamp": isoformat_utc(self._clock()),
                "url": page.url,
                "testName": test_name,
                "options": scan_options.to_dict(),
                "results": results,
            }
        )
        record_path = self.store.write_record(stem, record)
        log_event(
            _LOGGER,
            logging.INFO,
            "recorder.results.saved",
            path=str(record_path),
            violations=len(record.results.violations),
        )
        return results


def run_accessibility_scan(
    page: "Page",
    options: OptionsLike = None,
    *,
    store: Optional[ResultsStore] = None,
    scanner: Optional[Scanner] = None,
    settings: Optional[ReportSettings] = None,
) -> Dict[str, Any]:
    """Scan ``page`` and persist the record, screenshot and page markup.

    Without an explicit ``store`` the location comes from
    :meth:`ReportSettings.load`, which defaults to ``<cwd>/axeResults``.
    """

    if store is None or scanner is None:
        settings = settings or ReportSettings.load()
    if store is None:
        store = ResultsStore(settings.results_dir, settings.report_filename)
    if scanner is None:
        scanner = AxeScanner(settings.axe_script_url, settings.axe_script_path)
    return ScanRecorder(store, scanner).record(page, options)


__all__ = ["DEFAULT_TEST_NAME", "ScanRecorder", "Scanner", "coerce_options", "run_accessibility_scan"]
