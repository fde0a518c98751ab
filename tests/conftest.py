"""Shared pytest fixtures for the axereport test-suite."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from axereport.models import ScanRecord
from axereport.storage import ResultsStore

FIXED_NOW = datetime(2024, 5, 1, 10, 15, 30, 123000, tzinfo=timezone.utc)


class FakePage:
    """Minimal stand-in for :class:`playwright.sync_api.Page`."""

    def __init__(self, url: str = "https://example.com/", html: str = "<html><body>Hi</body></html>", result: Optional[Dict[str, Any]] = None) -> None:
        self.url = url
        self.html = html
        self.result = result or {"violations": [], "passes": [], "incomplete": [], "inapplicable": []}
        self.calls: List[tuple] = []

    def screenshot(self, *, path: str, full_page: bool = False) -> bytes:
        self.calls.append(("screenshot", path, full_page))
        Path(path).write_bytes(b"\x89PNG\r\n")
        return b"\x89PNG\r\n"

    def content(self) -> str:
        self.calls.append(("content",))
        return self.html

    def add_script_tag(self, **kwargs: Any) -> None:
        self.calls.append(("add_script_tag", kwargs))

    def evaluate(self, expression: str, arg: Any = None) -> Dict[str, Any]:
        self.calls.append(("evaluate", expression, arg))
        return self.result


class FakeScanner:
    """Oracle double returning a canned result and remembering its arguments."""

    def __init__(self, result: Dict[str, Any]) -> None:
        self.result = result
        self.calls: List[Dict[str, Any]] = []

    def analyze(self, page: Any, *, tags=(), include=None, exclude=None) -> Dict[str, Any]:
        self.calls.append({"page": page, "tags": list(tags), "include": include, "exclude": exclude})
        return self.result


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the root directory containing reusable fixture files."""

    return Path(__file__).parent / "fixtures"


@pytest.fixture
def json_fixture(fixtures_dir: Path) -> Callable[[str], dict]:
    """Return a callable that loads JSON fixture payloads by name."""

    def _load(name: str) -> dict:
        path = fixtures_dir / "json" / name
        return json.loads(path.read_text(encoding="utf-8"))

    return _load


@pytest.fixture
def axe_violations(json_fixture: Callable[[str], dict]) -> dict:
    """Raw axe output with a critical (3 nodes) and a minor (1 node) violation."""

    return json_fixture("axe_violations.json")


@pytest.fixture
def axe_clean(json_fixture: Callable[[str], dict]) -> dict:
    """Raw axe output without violations and a single passed check."""

    return json_fixture("axe_clean.json")


@pytest.fixture
def results_dir(tmp_path: Path) -> Path:
    """Return a results directory path that does not exist yet."""

    return tmp_path / "axeResults"


@pytest.fixture
def store(results_dir: Path) -> ResultsStore:
    return ResultsStore(results_dir)


@pytest.fixture
def make_record() -> Callable[..., ScanRecord]:
    """Return a factory building scan records around raw axe output."""

    def _make(
        test_name: str = "home",
        results: Optional[Dict[str, Any]] = None,
        *,
        url: str = "https://example.com/",
        timestamp: str = "2024-05-01T10:15:30.123Z",
        options: Optional[Dict[str, Any]] = None,
    ) -> ScanRecord:
        return ScanRecord.model_validate(
            {
                "timestamp": timestamp,
                "url": url,
                "testName": test_name,
                "options": options or {"testName": test_name},
                "results": results or {"violations": [], "passes": [], "incomplete": [], "inapplicable": []},
            }
        )

    return _make


@pytest.fixture
def put_record(store: ResultsStore) -> Callable[..., Path]:
    """Return a helper writing a record into the store with a chosen mtime."""

    def _put(record: ScanRecord, mtime: float, stem: Optional[str] = None) -> Path:
        store.ensure()
        path = store.write_record(stem or f"{record.test_name}-{int(mtime)}", record)
        os.utime(path, (mtime, mtime))
        return path

    return _put


@pytest.fixture
def fake_page(axe_violations: dict) -> FakePage:
    return FakePage(result=axe_violations)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def page_factory() -> Callable[..., FakePage]:
    return FakePage


@pytest.fixture
def fake_scanner(axe_violations: dict) -> FakeScanner:
    return FakeScanner(axe_violations)


@pytest.fixture(autouse=True)
def reset_root_handlers():
    """Drop console handlers installed by configure_logging during a test."""

    root = logging.getLogger()
    before = set(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in before and type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)
