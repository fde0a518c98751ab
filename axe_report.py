"""Command line entrypoint for generating the accessibility HTML report."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from axereport import configure_logging
from axereport.config import ReportSettings
from axereport.errors import AxeReportError, StoreMissingError
from axereport.render import TextReportRenderer
from axereport.report import ReportGenerator
from axereport.storage import ResultsStore
from axereport.tracing import log_event

_LOGGER = logging.getLogger("axe_report")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Aggregate axe-core scan records into a single HTML report"
    )
    parser.add_argument(
        "--results-dir",
        type=Path,
        help="Directory holding the -results.json records (default: ./axeResults).",
    )
    parser.add_argument(
        "--output",
        help="Report filename inside the results directory (default: accessibility-report.html).",
    )
    parser.add_argument("--config", type=Path, help="Path to an axereport.json settings file.")
    parser.add_argument(
        "--skip-invalid",
        action="store_true",
        default=None,
        help="Skip unreadable records instead of aborting the whole report.",
    )
    parser.add_argument(
        "--format",
        choices=("html", "text"),
        default="html",
        help="Also print a plain-text rendering to stdout when set to 'text'.",
    )
    parser.add_argument("--log-level", default="INFO", help="Python logging level (default: INFO)")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    configure_logging(getattr(logging, args.log_level.upper(), logging.INFO))

    settings = ReportSettings.load(args.config)
    if args.results_dir is not None:
        settings.results_dir = args.results_dir
    if args.output:
        settings.report_filename = args.output
    if args.skip_invalid is not None:
        settings.skip_invalid = args.skip_invalid

    store = ResultsStore(settings.results_dir, settings.report_filename)
    generator = ReportGenerator(store, skip_invalid=settings.skip_invalid)
    try:
        outcome = generator.generate()
    except StoreMissingError as exc:
        log_event(_LOGGER, logging.ERROR, "cli.store_missing", error=str(exc), path=str(exc.path))
        return 1
    except AxeReportError as exc:
        log_event(_LOGGER, logging.ERROR, "cli.report_failed", error=str(exc))
        return 1
    except Exception as exc:
        log_event(
            _LOGGER,
            logging.ERROR,
            "cli.unexpected_error",
            error=str(exc),
            exception=exc.__class__.__name__,
            exc_info=True,
        )
        return 1

    if outcome.written and args.format == "text":
        sys.stdout.write(TextReportRenderer().render(outcome.summary, datetime.now(timezone.utc)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
