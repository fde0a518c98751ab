"""axe-core adapter: injects the engine into a Playwright page and runs it."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

from .config import DEFAULT_AXE_SCRIPT_URL
from .tracing import log_event

if TYPE_CHECKING:
    from playwright.sync_api import Page

DEFAULT_TAGS = ("wcag2a", "wcag2aa", "wcag21a", "wcag21aa", "best-practice")

_AXE_RUN_SCRIPT = """
async ({ context, options }) => {
    return await axe.run(context === null ? document : context, options);
}
"""

_LOGGER = logging.getLogger("scanner")


def build_context(
    include: Optional[Sequence[str]] = None,
    exclude: Optional[Sequence[str]] = None,
) -> Optional[Dict[str, Any]]:
    """Return an axe context object, or ``None`` to scan the whole document."""

    context: Dict[str, Any] = {}
    if include:
        context["include"] = list(include)
    if exclude:
        context["exclude"] = list(exclude)
    return context or None


class AxeScanner:
    """Run axe-core against the current state of a page."""

    def __init__(self, script_url: str = DEFAULT_AXE_SCRIPT_URL, script_path: Path | None = None) -> None:
        self.script_url = script_url
        self.script_path = script_path

    def inject(self, page: "Page") -> None:
        if self.script_path is not None:
            page.add_script_tag(path=str(self.script_path))
        else:
            page.add_script_tag(url=self.script_url)

    def analyze(
        self,
        page: "Page",
        *,
        tags: Sequence[str] = DEFAULT_TAGS,
        include: Optional[Sequence[str]] = None,
        exclude: Optional[Sequence[str]] = None,
    ) -> Dict[str, Any]:
        """Return axe's raw result for ``page`` restricted to ``tags``."""

        self.inject(page)
        context = build_context(include, exclude)
        options = {"runOnly": {"type": "tag", "values": list(tags)}}
        log_event(
            _LOGGER,
            logging.DEBUG,
            "scanner.analyze.start",
            tags=list(tags),
            context=context,
        )
        results = page.evaluate(_AXE_RUN_SCRIPT, {"context": context, "options": options})
        log_event(
            _LOGGER,
            logging.DEBUG,
            "scanner.analyze.finish",
            violations=len(results.get("violations", [])),
            passes=len(results.get("passes", [])),
        )
        return results


__all__ = ["AxeScanner", "DEFAULT_TAGS", "build_context"]
