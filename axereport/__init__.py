"""Record axe-core scans of Playwright pages and aggregate them into an HTML report."""

from .breakdown import ReportSummary, SeverityBreakdown, SeverityCount, compute_breakdown, summarize
from .config import ReportSettings, load_settings
from .errors import AxeReportError, RecordParseError, StoreMissingError
from .logging_config import configure_logging
from .models import Impact, NodeResult, ScanOptions, ScanRecord, ScanResults, Violation
from .recorder import ScanRecorder, run_accessibility_scan
from .render import HtmlReportRenderer, TextReportRenderer, format_violations
from .report import ReportGenerator, ReportOutcome, generate_report
from .scanner import DEFAULT_TAGS, AxeScanner
from .storage import ResultsStore

__all__ = [
    "AxeReportError",
    "AxeScanner",
    "DEFAULT_TAGS",
    "HtmlReportRenderer",
    "Impact",
    "NodeResult",
    "RecordParseError",
    "ReportGenerator",
    "ReportOutcome",
    "ReportSettings",
    "ReportSummary",
    "ResultsStore",
    "ScanOptions",
    "ScanRecord",
    "ScanRecorder",
    "ScanResults",
    "SeverityBreakdown",
    "SeverityCount",
    "StoreMissingError",
    "TextReportRenderer",
    "Violation",
    "compute_breakdown",
    "configure_logging",
    "format_violations",
    "generate_report",
    "load_settings",
    "run_accessibility_scan",
    "summarize",
]
