"""Engine support: locating ffmpeg and gating jobs on its availability.

``init()`` starts detection in the background and is idempotent.
``ready()`` waits for detection and either returns True or raises
EngineUnavailableError. Once detection succeeded, ``ready()`` returns
immediately, so concurrent jobs are never serialized on it.
"""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from vjo.engine.models import EngineInfo, EngineStatus
from vjo.jobs.exceptions import EngineUnavailableError

logger = logging.getLogger(__name__)

# Timeout for the version check (seconds)
DETECTION_TIMEOUT = 10

# Oldest ffmpeg release with the options used by the pipelines
MIN_FFMPEG_VERSION = (4, 0)

_VERSION_PATTERN = re.compile(r"ffmpeg version (\S+)")


class ReadinessGate(Protocol):
    """What pipelines need from an engine support object."""

    def init(self) -> None:
        """Start engine setup. Calling it again has no effect."""
        ...

    async def ready(self) -> bool:
        """Wait until the engine can be used.

        Raises:
            EngineUnavailableError: If the engine never becomes available.
        """
        ...


def parse_version_string(version_str: str) -> tuple[int, ...] | None:
    """Parse a version string into a comparable tuple.

    Handles various version formats:
    - "6.1.1" -> (6, 1, 1)
    - "n6.1.1" -> (6, 1, 1)  (ffmpeg nightlies)
    - "4.4.2-0ubuntu0.22.04.1" -> (4, 4, 2)

    Args:
        version_str: Version string to parse.

    Returns:
        Tuple of version components, or None if parsing fails.
    """
    if not version_str:
        return None

    version_str = version_str.lstrip("nv")
    match = re.match(r"(\d+(?:\.\d+)*)", version_str)
    if not match:
        return None
    return tuple(int(p) for p in match.group(1).split("."))


def find_ffmpeg(configured_path: Path | None = None) -> Path | None:
    """Find the ffmpeg executable.

    Args:
        configured_path: Optional configured path override.

    Returns:
        Path to ffmpeg, or None if not found.
    """
    if configured_path:
        if configured_path.is_file():
            return configured_path
        logger.warning("Configured path for ffmpeg is not a file: %s", configured_path)

    which_result = shutil.which("ffmpeg")
    if which_result:
        return Path(which_result)
    return None


class EngineSupport:
    """Locates ffmpeg and verifies it runs.

    Inject one instance into VideoScheme; tests substitute any object
    with ``init()`` and ``async ready()``.
    """

    def __init__(
        self,
        configured_path: Path | None = None,
        min_version: tuple[int, ...] = MIN_FFMPEG_VERSION,
    ) -> None:
        """Initialize engine support.

        Args:
            configured_path: ffmpeg path from configuration, searched
                before PATH.
            min_version: Minimum acceptable ffmpeg version.
        """
        self._configured_path = configured_path
        self._min_version = min_version
        self._detection: asyncio.Task[EngineInfo] | None = None
        self.info = EngineInfo()

    @property
    def ffmpeg_path(self) -> Path | None:
        """Path of the detected ffmpeg, None before successful detection."""
        return self.info.path if self.info.is_available() else None

    def init(self) -> None:
        """Start detection on the running event loop (idempotent)."""
        if self._detection is None:
            self._detection = asyncio.get_running_loop().create_task(self.detect())

    async def ready(self) -> bool:
        """Wait for detection to finish.

        Returns:
            True once ffmpeg is usable.

        Raises:
            EngineUnavailableError: If ffmpeg is missing, outdated or broken.
        """
        self.init()
        assert self._detection is not None
        info = await asyncio.shield(self._detection)
        if not info.is_available():
            raise EngineUnavailableError(info.status_message or info.status.value)
        return True

    async def detect(self) -> EngineInfo:
        """Detect ffmpeg and record the result in ``self.info``."""
        info = EngineInfo(detected_at=datetime.now(timezone.utc))
        path = find_ffmpeg(self._configured_path)
        if path is None:
            info.status = EngineStatus.MISSING
            info.status_message = "ffmpeg not found in PATH"
            self.info = info
            logger.warning("ffmpeg not found in PATH")
            return info

        info.path = path
        stdout, rc = await self._run_version(path)
        if rc != 0:
            info.status = EngineStatus.ERROR
            info.status_message = f"Failed to get ffmpeg version: {stdout.strip()}"
            self.info = info
            logger.warning("%s", info.status_message)
            return info

        match = _VERSION_PATTERN.search(stdout)
        if match:
            info.version = match.group(1)
            info.version_tuple = parse_version_string(info.version)

        # Git builds report no comparable version, accept them
        if info.version_tuple is not None and not info.meets_version(
            self._min_version
        ):
            info.status = EngineStatus.OUTDATED
            info.status_message = (
                f"ffmpeg {info.version} is older than required "
                f"{'.'.join(str(p) for p in self._min_version)}"
            )
            logger.warning("%s", info.status_message)
        else:
            info.status = EngineStatus.AVAILABLE
            logger.info("Using ffmpeg %s at %s", info.version or "(unknown)", path)

        self.info = info
        return info

    @staticmethod
    async def _run_version(path: Path) -> tuple[str, int]:
        """Run ``ffmpeg -version``.

        Returns:
            Tuple of (combined output, returncode). returncode is -1 when the
            process could not be run or timed out.
        """
        try:
            process = await asyncio.create_subprocess_exec(  # nosec B603
                str(path),
                "-version",
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            return str(e), -1
        try:
            stdout, _ = await asyncio.wait_for(
                process.communicate(), DETECTION_TIMEOUT
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.warning("ffmpeg -version timed out: %s", path)
            return "timeout", -1
        return stdout.decode("utf-8", errors="replace"), process.returncode or 0
