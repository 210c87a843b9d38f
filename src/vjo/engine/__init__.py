"""Video engine (ffmpeg) integration.

This package locates the engine, runs it as an event-emitting subprocess,
and parses its diagnostic output.
"""

from vjo.engine.command import CANCELLED, EVENTS, EngineCommand
from vjo.engine.diagnostics import classify_error, last_diagnostic_line
from vjo.engine.models import EngineInfo, EngineStatus
from vjo.engine.progress import (
    EngineProgress,
    parse_duration,
    parse_stderr_progress,
    parse_stream_codec,
)
from vjo.engine.support import EngineSupport, ReadinessGate, parse_version_string

__all__ = [
    "CANCELLED",
    "EVENTS",
    "EngineCommand",
    "EngineInfo",
    "EngineProgress",
    "EngineStatus",
    "EngineSupport",
    "ReadinessGate",
    "classify_error",
    "last_diagnostic_line",
    "parse_duration",
    "parse_stderr_progress",
    "parse_stream_codec",
    "parse_version_string",
]
