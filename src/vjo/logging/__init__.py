"""Structured logging module.

Provides configurable logging with JSON format support and file rotation.
Includes job context support for concurrent jobs.
"""

from vjo.logging.config import configure_logging
from vjo.logging.context import (
    JobContextFilter,
    clear_job_context,
    get_job_context,
    job_context,
    set_job_context,
)
from vjo.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "JobContextFilter",
    "clear_job_context",
    "configure_logging",
    "get_job_context",
    "job_context",
    "set_job_context",
]
