"""Configuration data models.

This module defines dataclasses for configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    If not specified, ffmpeg is looked up in PATH.
    """

    ffmpeg: Path | None = None


@dataclass
class JobsConfig:
    """Timeouts for engine invocations, in seconds. 0 disables a timeout."""

    probe_timeout: float = 30.0
    screenshot_timeout: float = 120.0
    conversion_timeout: float = 0.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        for name in ("probe_timeout", "screenshot_timeout", "conversion_timeout"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")


@dataclass
class ConversionConfig:
    """Encoder settings for conversions.

    The fast path copies streams into ``container``; the slow path
    re-encodes with the settings below.
    """

    container: str = "mp4"
    video_encoder: str = "libx264"
    preset: str = "fast"
    crf: int = 23
    pixel_format: str = "yuv420p"
    audio_encoder: str = "aac"
    audio_bitrate: str = "128k"

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_containers = {"mp4", "mov"}
        if self.container not in valid_containers:
            raise ValueError(
                f"container must be one of {sorted(valid_containers)}, "
                f"got {self.container}"
            )
        if not 0 <= self.crf <= 51:
            raise ValueError(f"crf must be between 0 and 51, got {self.crf}")
        valid_presets = {
            "ultrafast",
            "superfast",
            "veryfast",
            "faster",
            "fast",
            "medium",
            "slow",
            "slower",
            "veryslow",
        }
        if self.preset not in valid_presets:
            raise ValueError(
                f"preset must be one of {sorted(valid_presets)}, got {self.preset}"
            )


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class VJOConfig:
    """Main configuration container.

    Aggregates all configuration sections.
    """

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    jobs: JobsConfig = field(default_factory=JobsConfig)
    conversion: ConversionConfig = field(default_factory=ConversionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
