"""Persistence helpers for the results store directory."""

from __future__ import annotations

import logging
import os
import stat
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from pydantic import ValidationError

from .config import DEFAULT_REPORT_FILENAME
from .errors import RecordParseError
from .models import ScanRecord
from .tracing import log_event

RECORD_SUFFIX = "-results.json"
SCREENSHOT_SUFFIX = "-screenshot.png"
PAGE_CONTENT_SUFFIX = "-page-content.html"
PARTIAL_SUFFIX = ".tmp"

_LOGGER = logging.getLogger("storage")


def isoformat_utc(moment: datetime) -> str:
    """Return ``moment`` as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def filesystem_safe(timestamp: str) -> str:
    """Replace characters that are illegal or awkward in filenames."""

    return timestamp.replace(":", "-").replace(".", "-")


class ResultsStore:
    """A directory holding scan records, their artifacts and the rendered report."""

    def __init__(self, root: Path, report_filename: str = DEFAULT_REPORT_FILENAME) -> None:
        self.root = Path(root)
        self.report_filename = report_filename

    def __repr__(self) -> str:
        return f"ResultsStore(root={str(self.root)!r})"

    # ------------------------------------------------------------------
    def exists(self) -> bool:
        return self.root.is_dir()

    def ensure(self) -> Path:
        """Create the store directory (and parents) if it is missing."""

        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    @staticmethod
    def stem_for(test_name: str, moment: datetime) -> str:
        return f"{test_name}-{filesystem_safe(isoformat_utc(moment))}"

    def screenshot_path(self, stem: str) -> Path:
        return self.root / f"{stem}{SCREENSHOT_SUFFIX}"

    def page_content_path(self, stem: str) -> Path:
        return self.root / f"{stem}{PAGE_CONTENT_SUFFIX}"

    def record_path(self, stem: str) -> Path:
        return self.root / f"{stem}{RECORD_SUFFIX}"

    @property
    def report_path(self) -> Path:
        return self.root / self.report_filename

    # ------------------------------------------------------------------
    def write_text(self, path: Path, content: str) -> Path:
        """Write ``content`` as UTF-8, replacing any existing file."""

        log_event(
            _LOGGER,
            logging.DEBUG,
            "storage.write_text.start",
            path=str(path),
            bytes=len(content.encode("utf-8")),
        )
        path.write_text(content, encoding="utf-8")
        log_event(_LOGGER, logging.DEBUG, "storage.write_text.finish", path=str(path))
        return path

    def write_record(self, stem: str, record: ScanRecord) -> Path:
        """Serialise ``record`` to ``<stem>-results.json``.

        The JSON is written under a ``.tmp`` name first and renamed into place,
        so a concurrent report run never lists a half-written record.
        """

        target = self.record_path(stem)
        partial = target.with_name(target.name + PARTIAL_SUFFIX)
        self.write_text(partial, record.to_json())
        os.replace(partial, target)
        log_event(_LOGGER, logging.DEBUG, "storage.record.published", path=str(target))
        return target

    def list_record_files(self) -> List[Path]:
        """Return record files, most recently modified first."""

        entries = []
        for item in self.root.iterdir():
            if not item.name.endswith(RECORD_SUFFIX):
                continue
            try:
                info = item.stat()
            except FileNotFoundError:
                # Removed between the directory listing and the stat call.
                continue
            if stat.S_ISREG(info.st_mode):
                entries.append((item, info.st_mtime))
        # Name sort first so files sharing an mtime keep a stable order.
        entries.sort(key=lambda entry: entry[0].name)
        entries.sort(key=lambda entry: entry[1], reverse=True)
        return [item for item, _ in entries]

    def load_record(self, path: Path) -> ScanRecord:
        """Parse the record at ``path``, raising :class:`RecordParseError` on bad input."""

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise RecordParseError(path, str(exc)) from exc
        try:
            return ScanRecord.from_json(text)
        except ValidationError as exc:
            reason = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
                for error in exc.errors()
            )
            raise RecordParseError(path, reason) from exc


__all__ = [
    "PAGE_CONTENT_SUFFIX",
    "PARTIAL_SUFFIX",
    "RECORD_SUFFIX",
    "SCREENSHOT_SUFFIX",
    "ResultsStore",
    "filesystem_safe",
    "isoformat_utc",
]
