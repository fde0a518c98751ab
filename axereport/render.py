"""Formatting layer turning a :class:`ReportSummary` into documents.

Renderers are pure: the same summary and ``generated_at`` always produce the
same output.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from .breakdown import ReportSummary, SeverityBreakdown
from .models import Impact, wcag_tags

_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

IMPACT_COLORS: Mapping[Impact, str] = {
    Impact.CRITICAL: "#dc3545",
    Impact.SERIOUS: "#fd7e14",
    Impact.MODERATE: "#ffc107",
    Impact.MINOR: "#17a2b8",
    Impact.UNKNOWN: "#6c757d",
}


def impact_color(value: Any) -> str:
    """Return the badge colour for a raw impact value or :class:`Impact`."""

    level = value if isinstance(value, Impact) else Impact.parse(value)
    return IMPACT_COLORS[level]


def impact_label(value: Optional[str]) -> str:
    return value.upper() if value else Impact.UNKNOWN.value.upper()


def format_timestamp(value: Any) -> str:
    """Render an ISO-8601 string or datetime as ``YYYY-MM-DD HH:MM:SS UTC``."""

    if isinstance(value, datetime):
        moment = value
    else:
        try:
            moment = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return str(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


class ReportRenderer(Protocol):
    media_type: str

    def render(self, summary: ReportSummary, generated_at: datetime) -> str:
        ...


class HtmlReportRenderer:
    """Render the self-contained HTML report from ``report.html.jinja``."""

    media_type = "text/html"

    def __init__(self, template_dir: Path | None = None) -> None:
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir or _TEMPLATE_DIR)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters["impact_color"] = impact_color
        self._env.filters["impact_label"] = impact_label
        self._env.filters["timestamp"] = format_timestamp

    def render(self, summary: ReportSummary, generated_at: datetime) -> str:
        template = self._env.get_template("report.html.jinja")
        return template.render(
            summary=summary,
            generated_at=format_timestamp(generated_at),
            colors=IMPACT_COLORS,
        )


class TextReportRenderer:
    """Plain-text rendering of the same summary, used for console output."""

    media_type = "text/plain"

    def render(self, summary: ReportSummary, generated_at: datetime) -> str:
        lines: List[str] = [
            "Accessibility Test Report",
            f"Generated on {format_timestamp(generated_at)}",
            "",
            f"Total violations:  {summary.total_violations}",
            f"Total passed:      {summary.total_passed}",
            f"Tests run:         {summary.record_count}",
            f"Tests with issues: {summary.records_with_issues}",
        ]
        if summary.total_violations > 0:
            lines.append("")
            lines.append(_breakdown_line(summary.breakdown, summary.total_violations))
        for item in summary.records:
            record = item.record
            lines.extend(
                [
                    "",
                    f"== {record.test_name}",
                    f"URL: {record.url}",
                    f"Tested: {format_timestamp(record.timestamp)}",
                    (
                        f"{item.violation_count} violations, {item.passed_count} passed, "
                        f"{item.inapplicable_count} inapplicable, {item.incomplete_count} incomplete"
                    ),
                ]
            )
            if item.has_violations:
                lines.append(_breakdown_line(item.breakdown, item.violation_count))
                lines.append(format_violations(record.results.model_dump(by_alias=True)))
            else:
                lines.append("No accessibility violations found.")
        if summary.skipped:
            lines.append("")
            lines.append("Skipped unreadable records: " + ", ".join(path.name for path in summary.skipped))
        return "\n".join(lines) + "\n"


def _breakdown_line(breakdown: SeverityBreakdown, total: int) -> str:
    parts = [f"{level.value} {bucket.count} ({bucket.node_count} nodes)" for level, bucket in breakdown.items()]
    parts.append(f"total {total} ({breakdown.total_nodes} nodes)")
    return "Severity: " + ", ".join(parts)


def format_violations(results: Mapping[str, Any], max_nodes: int = 3) -> str:
    """Summarise one raw oracle result for test output.

    Only the first ``max_nodes`` affected elements of each violation are
    listed; the remainder is reported as a count.
    """

    violations: List[Dict[str, Any]] = list(results.get("violations") or [])
    if not violations:
        return "No accessibility violations found."

    summary = [f"Found {len(violations)} accessibility violations:"]
    for index, violation in enumerate(violations, start=1):
        nodes = violation.get("nodes") or []
        summary.append(
            f"\n{index}. {violation.get('id')}: {violation.get('help')} (Impact: {violation.get('impact')})"
        )
        summary.append(f"   Description: {violation.get('description')}")
        summary.append(f"   WCAG: {', '.join(wcag_tags(violation.get('tags') or []))}")
        summary.append(f"   Help URL: {violation.get('helpUrl')}")
        summary.append(f"   Affected nodes: {len(nodes)}")
        for node in nodes[:max_nodes]:
            summary.append(f"     - {node.get('html')}")
            summary.append(f"       {node.get('failureSummary')}")
        if len(nodes) > max_nodes:
            summary.append(f"     ... and {len(nodes) - max_nodes} more")
    return "\n".join(summary)


__all__ = [
    "HtmlReportRenderer",
    "IMPACT_COLORS",
    "ReportRenderer",
    "TextReportRenderer",
    "format_timestamp",
    "format_violations",
    "impact_color",
]
