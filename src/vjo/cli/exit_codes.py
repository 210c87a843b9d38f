"""Centralized exit codes for all CLI commands."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for vjo CLI commands."""

    SUCCESS = 0
    JOB_FAILED = 1
    ENGINE_UNAVAILABLE = 2
