"""Tests for :mod:`axereport.report`."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from axereport.errors import RecordParseError, StoreMissingError
from axereport.models import Impact
from axereport.render import TextReportRenderer
from axereport.report import STATUS_EMPTY, STATUS_WRITTEN, ReportGenerator
from axereport.storage import PARTIAL_SUFFIX, ResultsStore


def test_missing_store_raises(store: ResultsStore, fixed_clock) -> None:
    """Given no results directory When the report is generated Then StoreMissingError is raised."""

    with pytest.raises(StoreMissingError):
        ReportGenerator(store, clock=fixed_clock).generate()

    assert not store.report_path.exists()


def test_empty_store_is_a_noop(store: ResultsStore, fixed_clock, caplog: pytest.LogCaptureFixture) -> None:
    """Given an empty results directory When the report is generated Then nothing is written."""

    store.ensure()

    with caplog.at_level(logging.INFO):
        outcome = ReportGenerator(store, clock=fixed_clock).generate()

    assert outcome.status == STATUS_EMPTY
    assert outcome.report_path is None
    assert outcome.summary.record_count == 0
    assert not store.report_path.exists()
    assert "No accessibility test results found." in caplog.text


def test_generate_orders_records_newest_first(store: ResultsStore, make_record, put_record, fixed_clock) -> None:
    """Given records with mtimes t3, t1, t2 When aggregated Then the summary lists t3, t2, t1."""

    put_record(make_record("third"), 1_700_000_300)
    put_record(make_record("first"), 1_700_000_100)
    put_record(make_record("second"), 1_700_000_200)

    outcome = ReportGenerator(store, clock=fixed_clock).generate()

    assert [item.record.test_name for item in outcome.summary.records] == ["third", "second", "first"]
    html = store.report_path.read_text(encoding="utf-8")
    assert html.index("<h2>third</h2>") < html.index("<h2>second</h2>") < html.index("<h2>first</h2>")


def test_corrupt_record_is_fatal_by_default(store: ResultsStore, make_record, put_record, fixed_clock) -> None:
    """Given one corrupt record When aggregated Then the whole run fails without a report."""

    put_record(make_record("good"), 1_700_000_000)
    store.record_path("bad").write_text("{", encoding="utf-8")

    with pytest.raises(RecordParseError):
        ReportGenerator(store, clock=fixed_clock).generate()

    assert not store.report_path.exists()


def test_skip_invalid_reports_remaining_records(
    store: ResultsStore, make_record, put_record, fixed_clock, axe_violations: dict
) -> None:
    """Given a corrupt record and lenient mode When aggregated Then the bad file is listed as skipped."""

    put_record(make_record("good", axe_violations), 1_700_000_000)
    bad = store.record_path("bad")
    bad.write_text("[]", encoding="utf-8")

    outcome = ReportGenerator(store, skip_invalid=True, clock=fixed_clock).generate()

    assert outcome.status == STATUS_WRITTEN
    assert outcome.summary.skipped == [bad]
    assert outcome.summary.record_count == 1
    assert outcome.summary.breakdown[Impact.CRITICAL].node_count == 3
    assert "bad-results.json" in store.report_path.read_text(encoding="utf-8")


def test_generate_overwrites_previous_report(store: ResultsStore, make_record, put_record, fixed_clock) -> None:
    """Given an existing report When regenerated Then the file is replaced."""

    put_record(make_record("home"), 1_700_000_000)
    store.report_path.write_text("stale", encoding="utf-8")

    ReportGenerator(store, clock=fixed_clock).generate()

    assert store.report_path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")


def test_generate_logs_summary_line(
    store: ResultsStore, make_record, put_record, fixed_clock, axe_violations: dict, caplog: pytest.LogCaptureFixture
) -> None:
    """Given records When aggregated Then a one-line run summary is logged."""

    put_record(make_record("checkout", axe_violations), 1_700_000_000)

    with caplog.at_level(logging.INFO):
        ReportGenerator(store, clock=fixed_clock).generate()

    assert "1 tests, 2 violations, 2 passed checks" in caplog.text


def test_generate_accepts_other_renderers(store: ResultsStore, make_record, put_record, fixed_clock) -> None:
    """Given a text renderer When aggregated Then the document uses that format."""

    put_record(make_record("home"), 1_700_000_000)

    ReportGenerator(store, TextReportRenderer(), clock=fixed_clock).generate()

    assert store.report_path.read_text(encoding="utf-8").startswith("Accessibility Test Report\n")


def test_generate_ignores_a_record_that_is_still_being_written(
    store: ResultsStore, make_record, put_record, fixed_clock
) -> None:
    """Given a finished record and an empty in-flight file When aggregated Then only the finished record is reported."""

    put_record(make_record("home"), 1_700_000_000)
    (store.root / f"checkout-2024-05-01T10-15-30-123Z-results.json{PARTIAL_SUFFIX}").write_text("", encoding="utf-8")

    outcome = ReportGenerator(store, clock=fixed_clock).generate()

    assert outcome.status == STATUS_WRITTEN
    assert [item.record.test_name for item in outcome.summary.records] == ["home"]


def test_skip_invalid_covers_unreadable_records(
    store: ResultsStore, make_record, put_record, fixed_clock, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Given a record that raises PermissionError on read and lenient mode When aggregated Then it is skipped."""

    put_record(make_record("good"), 1_700_000_000)
    locked = put_record(make_record("locked"), 1_700_000_100)
    original_read_text = Path.read_text

    def _read_text(self: Path, *args, **kwargs) -> str:
        if self == locked:
            raise PermissionError(13, "Permission denied", str(self))
        return original_read_text(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", _read_text)

    outcome = ReportGenerator(store, skip_invalid=True, clock=fixed_clock).generate()

    assert outcome.summary.skipped == [locked]
    assert [item.record.test_name for item in outcome.summary.records] == ["good"]


def test_generate_notes_record_counts_on_the_trace(
    store: ResultsStore, make_record, put_record, fixed_clock, caplog: pytest.LogCaptureFixture
) -> None:
    """Given records When aggregated at DEBUG level Then the trace span notes how many were read."""

    put_record(make_record("home"), 1_700_000_000)
    put_record(make_record("about"), 1_700_000_100)

    with caplog.at_level(logging.DEBUG, logger="report"):
        ReportGenerator(store, clock=fixed_clock).generate()

    notes = [record.getMessage() for record in caplog.records if "trace.note" in record.getMessage()]
    assert len(notes) == 1
    assert '"records": 2' in notes[0]
    assert '"skipped": 0' in notes[0]
    assert '"trace": "report.generate"' in notes[0]
