"""Data models for the detected video engine."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path


class EngineStatus(Enum):
    """Status of the engine binary."""

    AVAILABLE = "available"  # Binary found and version detected
    MISSING = "missing"  # Not found in PATH or configured location
    OUTDATED = "outdated"  # Found but version below minimum required
    ERROR = "error"  # Found but version check failed


@dataclass
class EngineInfo:
    """Detection result for the ffmpeg binary."""

    name: str = "ffmpeg"
    path: Path | None = None
    version: str | None = None
    version_tuple: tuple[int, ...] | None = None  # Parsed version for comparison
    status: EngineStatus = EngineStatus.MISSING
    status_message: str | None = None
    detected_at: datetime | None = None

    def is_available(self) -> bool:
        """Return True if the engine is available and usable."""
        return self.status == EngineStatus.AVAILABLE

    def meets_version(self, min_version: tuple[int, ...]) -> bool:
        """Check if the engine version meets a minimum requirement.

        Args:
            min_version: Minimum version as tuple (e.g., (4, 0) for 4.0).

        Returns:
            True if version >= min_version, False otherwise.
        """
        if self.version_tuple is None:
            return False
        # Compare tuple by tuple, padding shorter with zeros
        max_len = max(len(self.version_tuple), len(min_version))
        v1 = self.version_tuple + (0,) * (max_len - len(self.version_tuple))
        v2 = min_version + (0,) * (max_len - len(min_version))
        return v1 >= v2
