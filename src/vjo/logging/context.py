"""Job context for structured logging.

Provides context propagation for pipeline tasks using contextvars,
enabling automatic injection of job_id and source into log records.
Each asyncio task runs in a copy of the context, so concurrent jobs
never see each other's values.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_job_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)
_job_source: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_source", default=None
)


def set_job_context(job_id: str, source: str | None = None) -> None:
    """Set the current job context.

    Args:
        job_id: Job identifier.
        source: Source URL the job works on.
    """
    _job_id.set(job_id)
    _job_source.set(source)


def clear_job_context() -> None:
    """Clear the current job context."""
    _job_id.set(None)
    _job_source.set(None)


@contextmanager
def job_context(job_id: str, source: str | None = None) -> Generator[None, None, None]:
    """Context manager for job processing context.

    Sets job context on entry and restores the previous values on exit.

    Example:
        with job_context(job.id, job.source_url):
            logger.info("Extracting frame")  # Automatically includes context
    """
    old_job_id = _job_id.get()
    old_source = _job_source.get()
    try:
        set_job_context(job_id, source)
        yield
    finally:
        _job_id.set(old_job_id)
        _job_source.set(old_source)


def get_job_context() -> tuple[str | None, str | None]:
    """Get current job context.

    Returns:
        Tuple of (job_id, source), either may be None.
    """
    return _job_id.get(), _job_source.get()


class JobContextFilter(logging.Filter):
    """Logging filter that injects job context into log records.

    Adds job_id and job_source attributes to the LogRecord. For text
    format, also adds a compact job_tag like ``[job:1a2b3c4d] ``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        job_id, source = get_job_context()

        record.job_id = job_id
        record.job_source = source
        record.job_tag = f"[job:{job_id[:8]}] " if job_id else ""

        return True  # Never filter out records
