"""Logging setup for the orchestrator.

The orchestrator is usually embedded in a host application that owns the
root logger. configure_logging() therefore only replaces the handlers it
installed itself and leaves any other root handlers in place.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from vjo.logging.context import JobContextFilter
from vjo.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from vjo.config.models import LoggingConfig

logger = logging.getLogger(__name__)

# job_tag is "[job:1a2b3c4d] " inside a job, empty otherwise
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(job_tag)s%(name)s: %(message)s"
TEXT_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

# Handlers added by the last configure_logging() call
_installed: list[logging.Handler] = []


def build_formatter(fmt: str) -> logging.Formatter:
    """Return the formatter for a ``text`` or ``json`` log format."""
    if fmt.casefold() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)


def _open_log_file(config: LoggingConfig) -> RotatingFileHandler:
    path = Path(config.file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )


def _remove_installed(root: logging.Logger) -> None:
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()


def configure_logging(config: LoggingConfig) -> list[logging.Handler]:
    """Install orchestrator log handlers on the root logger.

    Handlers from an earlier call are replaced. Every installed handler
    carries the job context filter, so records logged inside a job are
    tagged with its id. A log file that cannot be opened falls back to
    stderr with a warning.

    Args:
        config: Logging configuration.

    Returns:
        The handlers that were installed.
    """
    level = logging.getLevelName(config.level.upper())
    root = logging.getLogger()
    root.setLevel(level)
    _remove_installed(root)

    handlers: list[logging.Handler] = []
    file_error: OSError | None = None
    if config.file:
        try:
            handlers.append(_open_log_file(config))
        except OSError as e:
            file_error = e
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    formatter = build_formatter(config.format)
    context_filter = JobContextFilter()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)
        _installed.append(handler)

    if file_error is not None:
        logger.warning(
            "Could not open log file %s, logging to stderr: %s",
            config.file,
            file_error,
        )
    return handlers
