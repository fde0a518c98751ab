"""Exceptions raised by the results store and the report generator."""

from __future__ import annotations

from pathlib import Path


class AxeReportError(RuntimeError):
    """Base class for failures the report command reports to the operator."""


class StoreMissingError(AxeReportError):
    """The results directory does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Results directory not found: {path}")
        self.path = path


class RecordParseError(AxeReportError):
    """A ``-results.json`` record is not valid JSON or has the wrong shape."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Unable to parse scan record {path.name}: {reason}")
        self.path = path
        self.reason = reason


__all__ = ["AxeReportError", "RecordParseError", "StoreMissingError"]
