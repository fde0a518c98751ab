"""Data models for persisted scan records.

The oracle's output is loosely shaped JSON. Only the fields the report reads
are typed; everything else is kept as extra data so a record survives a
parse/serialise round trip unchanged.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class Impact(str, Enum):
    """Severity classification of a violation."""

    CRITICAL = "critical"
    SERIOUS = "serious"
    MODERATE = "moderate"
    MINOR = "minor"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "Impact":
        """Map a raw impact value onto a level; anything unrecognised is ``UNKNOWN``."""

        for level in cls.levels():
            if level.value == value:
                return level
        return cls.UNKNOWN

    @classmethod
    def levels(cls) -> tuple["Impact", ...]:
        """Return the recognised levels, most severe first."""

        return (cls.CRITICAL, cls.SERIOUS, cls.MODERATE, cls.MINOR)


class _OracleModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ScanOptions(_OracleModel):
    """Options accepted by the recorder; stored verbatim for traceability."""

    include: Optional[List[str]] = None
    exclude: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    test_name: Optional[str] = Field(default=None, alias="testName")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class NodeResult(_OracleModel):
    """An element affected by a violation."""

    html: str
    failure_summary: Optional[str] = Field(default=None, alias="failureSummary")
    target: Optional[List[Any]] = None

    @property
    def selector(self) -> Optional[str]:
        """Return the target selectors as one readable string, or ``None``."""

        if not self.target:
            return None
        parts: List[str] = []
        for item in self.target:
            if isinstance(item, (list, tuple)):
                # Frame and shadow DOM targets nest one selector per boundary.
                parts.append(" >>> ".join(str(piece) for piece in item))
            else:
                parts.append(str(item))
        return ", ".join(parts)


class Violation(_OracleModel):
    id: str
    help: str
    description: str
    impact: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    help_url: str = Field(alias="helpUrl")
    nodes: List[NodeResult] = Field(default_factory=list)

    @property
    def severity(self) -> Impact:
        return Impact.parse(self.impact)

    @property
    def wcag_tags(self) -> List[str]:
        return wcag_tags(self.tags)

    @property
    def node_count(self) -> int:
        return len(self.nodes)


class ScanResults(_OracleModel):
    """The four result lists returned by the oracle."""

    violations: List[Violation] = Field(default_factory=list)
    passes: List[Any] = Field(default_factory=list)
    incomplete: List[Any] = Field(default_factory=list)
    inapplicable: List[Any] = Field(default_factory=list)


class ScanRecord(_OracleModel):
    """One persisted scan invocation (one ``-results.json`` file)."""

    timestamp: str
    url: str
    test_name: str = Field(alias="testName")
    options: ScanOptions = Field(default_factory=ScanOptions)
    results: ScanResults = Field(default_factory=ScanResults)

    @field_serializer("options")
    def _serialise_options(self, options: ScanOptions) -> Dict[str, Any]:
        return options.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        """Return the record as pretty-printed JSON."""

        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "ScanRecord":
        return cls.model_validate_json(text)


def wcag_tags(tags: Sequence[str]) -> List[str]:
    """Return the subset of ``tags`` naming WCAG success criteria or levels."""

    return [tag for tag in tags if tag.startswith("wcag")]


__all__ = [
    "Impact",
    "NodeResult",
    "ScanOptions",
    "ScanRecord",
    "ScanResults",
    "Violation",
    "wcag_tags",
]
