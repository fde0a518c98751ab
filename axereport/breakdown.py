"""Severity breakdowns and the roll-up across every record in a store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Sequence, Tuple

from .models import Impact, ScanRecord, Violation


@dataclass(frozen=True, slots=True)
class SeverityCount:
    """Violations at one impact level and the elements they affect."""

    count: int = 0
    node_count: int = 0

    def __add__(self, other: "SeverityCount") -> "SeverityCount":
        return SeverityCount(self.count + other.count, self.node_count + other.node_count)


@dataclass(frozen=True, slots=True, eq=False)
class SeverityBreakdown:
    """Per-impact counts for the four recognised levels.

    ``UNKNOWN`` never has a bucket; violations with an unrecognised impact are
    left out of every breakdown.
    """

    buckets: Mapping[Impact, SeverityCount] = field(
        default_factory=lambda: {level: SeverityCount() for level in Impact.levels()}
    )

    @classmethod
    def empty(cls) -> "SeverityBreakdown":
        return cls()

    def __getitem__(self, level: Impact) -> SeverityCount:
        return self.buckets.get(level, SeverityCount())

    def __add__(self, other: "SeverityBreakdown") -> "SeverityBreakdown":
        return SeverityBreakdown({level: self[level] + other[level] for level in Impact.levels()})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SeverityBreakdown):
            return NotImplemented
        return all(self[level] == other[level] for level in Impact.levels())

    def __hash__(self) -> int:
        return hash(tuple(self[level] for level in Impact.levels()))

    def items(self) -> Iterator[Tuple[Impact, SeverityCount]]:
        """Yield ``(level, counts)`` pairs, most severe first."""

        for level in Impact.levels():
            yield level, self[level]

    @property
    def total_count(self) -> int:
        return sum(bucket.count for _, bucket in self.items())

    @property
    def total_nodes(self) -> int:
        return sum(bucket.node_count for _, bucket in self.items())

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {
            level.value: {"count": bucket.count, "nodeCount": bucket.node_count}
            for level, bucket in self.items()
        }


def compute_breakdown(violations: Iterable[Violation]) -> SeverityBreakdown:
    """Bucket ``violations`` by impact, counting violations and affected nodes."""

    counts: Dict[Impact, SeverityCount] = {level: SeverityCount() for level in Impact.levels()}
    for violation in violations:
        level = violation.severity
        if level is Impact.UNKNOWN:
            continue
        counts[level] = counts[level] + SeverityCount(1, violation.node_count)
    return SeverityBreakdown(counts)


@dataclass(slots=True)
class RecordSummary:
    """A loaded record together with where it came from and its breakdown."""

    record: ScanRecord
    path: Path
    modified_at: datetime
    breakdown: SeverityBreakdown

    @classmethod
    def from_record(cls, record: ScanRecord, path: Path, modified_at: datetime) -> "RecordSummary":
        return cls(
            record=record,
            path=path,
            modified_at=modified_at,
            breakdown=compute_breakdown(record.results.violations),
        )

    @property
    def violation_count(self) -> int:
        # Raw count; violations with an unrecognised impact still count here.
        return len(self.record.results.violations)

    @property
    def passed_count(self) -> int:
        return len(self.record.results.passes)

    @property
    def inapplicable_count(self) -> int:
        return len(self.record.results.inapplicable)

    @property
    def incomplete_count(self) -> int:
        return len(self.record.results.incomplete)

    @property
    def has_violations(self) -> bool:
        return self.violation_count > 0


@dataclass(slots=True)
class ReportSummary:
    """Totals across every record included in one report run."""

    records: List[RecordSummary] = field(default_factory=list)
    total_violations: int = 0
    total_passed: int = 0
    records_with_issues: int = 0
    breakdown: SeverityBreakdown = field(default_factory=SeverityBreakdown.empty)
    skipped: List[Path] = field(default_factory=list)

    @property
    def record_count(self) -> int:
        return len(self.records)


def summarize(records: Sequence[RecordSummary], skipped: Iterable[Path] = ()) -> ReportSummary:
    """Aggregate ``records`` (already in display order) into a report summary."""

    breakdown = SeverityBreakdown.empty()
    for item in records:
        breakdown = breakdown + item.breakdown
    return ReportSummary(
        records=list(records),
        total_violations=sum(item.violation_count for item in records),
        total_passed=sum(item.passed_count for item in records),
        records_with_issues=sum(1 for item in records if item.has_violations),
        breakdown=breakdown,
        skipped=list(skipped),
    )


__all__ = [
    "RecordSummary",
    "ReportSummary",
    "SeverityBreakdown",
    "SeverityCount",
    "compute_breakdown",
    "summarize",
]
