"""FFmpeg stderr parsing utilities.

This module turns the human-oriented lines ffmpeg writes to stderr into
structured values: progress samples, the input duration, and the codec
description of each input stream.
"""

import re
from dataclasses import dataclass


@dataclass
class EngineProgress:
    """Parsed ffmpeg progress line."""

    frame: int | None = None
    fps: float | None = None
    bitrate: str | None = None
    total_size: int | None = None
    out_time_us: int | None = None  # Output time in microseconds
    speed: str | None = None
    percent: float | None = None  # Filled in when the input duration is known

    @property
    def out_time_seconds(self) -> float | None:
        """Get output time in seconds."""
        if self.out_time_us is not None:
            return self.out_time_us / 1_000_000
        return None

    def get_percent(self, duration_seconds: float | None) -> float | None:
        """Calculate progress percentage based on duration.

        Args:
            duration_seconds: Total duration of the input in seconds.

        Returns:
            Progress percentage (0.0 to 100.0), or None if unknown.
        """
        if duration_seconds is None or duration_seconds <= 0:
            return None
        out_time = self.out_time_seconds
        if out_time is None:
            return None
        return min(100.0, (out_time / duration_seconds) * 100)


# Regex patterns for ffmpeg stderr progress output
PROGRESS_PATTERNS = {
    "frame": re.compile(r"frame=\s*(\d+)"),
    "fps": re.compile(r"fps=\s*([\d.]+)"),
    "bitrate": re.compile(r"bitrate=\s*([^\s]+)"),
    "total_size": re.compile(r"L?size=\s*(\d+)"),
    "speed": re.compile(r"speed=\s*([^\s]+)"),
}

_TIME_PATTERN = re.compile(r"time=(\d+):(\d+):(\d+)\.(\d+)")
_DURATION_PATTERN = re.compile(r"Duration:\s*(\d+):(\d+):(\d+)\.(\d+)")
_STREAM_PATTERN = re.compile(
    r"Stream #\d+:\d+(?:\[\w+\])?(?:\(\w+\))?:\s*(Video|Audio):\s*(.+)$"
)


def _convert_progress_value(key: str, value: str) -> int | float | str | None:
    """Convert a progress value to the appropriate type."""
    if key in ("frame", "total_size"):
        try:
            return int(value)
        except ValueError:
            return None
    if key == "fps":
        try:
            return float(value)
        except ValueError:
            return None
    return value if value != "N/A" else None


def _timestamp_us(match: re.Match) -> int:
    """Convert a HH:MM:SS.cc match into microseconds."""
    hours, minutes, seconds = (int(match.group(i)) for i in (1, 2, 3))
    fraction = match.group(4)
    micros = int(fraction.ljust(6, "0")[:6])
    return (hours * 3600 + minutes * 60 + seconds) * 1_000_000 + micros


def parse_stderr_progress(line: str) -> EngineProgress | None:
    """Parse ffmpeg stderr progress line.

    ffmpeg outputs progress to stderr in format:
    frame= 1234 fps= 30 ... time=00:01:23.45 bitrate=5000kbits/s speed=2.0x

    Args:
        line: A line from ffmpeg stderr.

    Returns:
        Parsed EngineProgress or None if not a progress line.
    """
    if "frame=" not in line and "time=" not in line:
        return None

    result = EngineProgress()
    for key, pattern in PROGRESS_PATTERNS.items():
        match = pattern.search(line)
        if match:
            converted = _convert_progress_value(key, match.group(1))
            if converted is not None:
                setattr(result, key, converted)

    time_match = _TIME_PATTERN.search(line)
    if time_match:
        result.out_time_us = _timestamp_us(time_match)
    elif result.frame is None:
        return None

    return result


def parse_duration(line: str) -> float | None:
    """Parse the input duration from an ffmpeg ``Duration:`` header line.

    Args:
        line: A line from ffmpeg stderr.

    Returns:
        Duration in seconds, or None if the line carries no duration
        (live streams report ``Duration: N/A``).
    """
    match = _DURATION_PATTERN.search(line)
    if not match:
        return None
    return _timestamp_us(match) / 1_000_000


def parse_stream_codec(line: str) -> tuple[str, str] | None:
    """Parse an input stream description line.

    Args:
        line: A line such as
            ``Stream #0:0(und): Video: h264 (High) (avc1 / 0x31637661), ...``

    Returns:
        Tuple of (stream kind, codec description) where kind is "video" or
        "audio" and the description is the text before the first comma,
        e.g. ("video", "h264 (High) (avc1 / 0x31637661)"). None for other
        lines.
    """
    match = _STREAM_PATTERN.search(line.strip())
    if not match:
        return None
    kind = match.group(1).lower()
    description = match.group(2).split(",", 1)[0].strip()
    return kind, description
