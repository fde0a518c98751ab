"""Logging setup shared by the scan recorder and the report command."""

from __future__ import annotations

import logging
import sys
from typing import Optional


_LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
)


def configure_logging(level: int = logging.INFO, stream: Optional[logging.Handler] = None) -> None:
    """Configure the root logger for console output.

    Parameters
    ----------
    level:
        The logging level to apply across the root logger.
    stream:
        Optional handler. When omitted a handler pointing to ``sys.stderr``
        is used so that ``--format text`` output on stdout stays clean.
    """

    root_logger = logging.getLogger()
    if stream is None:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
    else:
        handler = stream

    handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)

    root_logger.setLevel(level)
    root_logger.addHandler(handler)


__all__ = ["configure_logging"]
