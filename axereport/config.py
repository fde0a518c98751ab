"""Configuration helpers for the scan recorder and the report command."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

_LOGGER = logging.getLogger(__name__)
_DEFAULT_CONFIG_NAME = "axereport.json"

DEFAULT_RESULTS_DIRNAME = "axeResults"
DEFAULT_REPORT_FILENAME = "accessibility-report.html"
DEFAULT_AXE_SCRIPT_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.9.1/axe.min.js"

_TRUTHY = {"1", "true", "yes", "on"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


@dataclass(slots=True)
class ReportSettings:
    """Locations and switches shared by both components.

    ``results_dir`` is always explicit; callers that want the historic
    ``<cwd>/axeResults`` default get it resolved once, at load time.
    """

    results_dir: Path = field(default_factory=lambda: Path.cwd() / DEFAULT_RESULTS_DIRNAME)
    report_filename: str = DEFAULT_REPORT_FILENAME
    axe_script_url: str = DEFAULT_AXE_SCRIPT_URL
    axe_script_path: Path | None = None
    skip_invalid: bool = False

    @classmethod
    def load(cls, path: Path | None = None) -> "ReportSettings":
        """Load settings from a JSON file and ``AXEREPORT_*`` environment overrides."""

        config_path = path or Path.cwd() / _DEFAULT_CONFIG_NAME
        data: Dict[str, Any] = {}

        if config_path.exists():
            try:
                data = json.loads(config_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                _LOGGER.warning(
                    "Unable to decode axereport config at %s: %s", config_path, exc
                )

        env_map = {
            "results_dir": "AXEREPORT_RESULTS_DIR",
            "report_filename": "AXEREPORT_REPORT_FILENAME",
            "axe_script_url": "AXEREPORT_AXE_SCRIPT_URL",
            "axe_script_path": "AXEREPORT_AXE_SCRIPT_PATH",
            "skip_invalid": "AXEREPORT_SKIP_INVALID",
        }
        for key, env_name in env_map.items():
            value = os.environ.get(env_name)
            if value is not None:
                data[key] = value

        settings = cls()
        if data.get("results_dir"):
            settings.results_dir = Path(data["results_dir"]).expanduser()
        if data.get("report_filename"):
            settings.report_filename = str(data["report_filename"])
        if data.get("axe_script_url"):
            settings.axe_script_url = str(data["axe_script_url"])
        if data.get("axe_script_path"):
            settings.axe_script_path = Path(data["axe_script_path"]).expanduser()
        if "skip_invalid" in data:
            settings.skip_invalid = _as_bool(data["skip_invalid"])
        return settings


def load_settings(path: Path | None = None) -> ReportSettings:
    """Helper to load the report settings."""

    return ReportSettings.load(path)


__all__ = [
    "DEFAULT_AXE_SCRIPT_URL",
    "DEFAULT_REPORT_FILENAME",
    "DEFAULT_RESULTS_DIRNAME",
    "ReportSettings",
    "load_settings",
]
