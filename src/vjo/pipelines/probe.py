"""Codec probing.

Runs the engine over the first second of the input without audio and
with a null output, just long enough for it to print the input stream
descriptions.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any

from vjo.engine.command import CANCELLED
from vjo.jobs.exceptions import EngineFailureError, ProbeFailedError
from vjo.jobs.models import Job, JobKind, JobState
from vjo.jobs.options import JobOptions
from vjo.logging.context import job_context
from vjo.pipelines.base import EnginePipelineBase, to_engine_failure
from vjo.pipelines.paths import parse_source

logger = logging.getLogger(__name__)

# Seconds of input decoded by a probe
PROBE_DURATION_SECONDS = 1

_CODEC_TOKEN = re.compile(r"[^\s(]+")


def parse_codec_name(description: str) -> str | None:
    """Extract the codec name from an engine stream description.

    Example:
        >>> parse_codec_name("h264 (High) (avc1 / 0x31637661)")
        'h264'
    """
    match = _CODEC_TOKEN.match(description.strip())
    return match.group(0).casefold() if match else None


class CodecProber(EnginePipelineBase):
    """Determines the video codec of a source."""

    async def probe(self, source_url: str) -> str:
        """Probe the video codec of a source.

        Args:
            source_url: ``file://`` or ``http(s)://`` source URL.

        Returns:
            Lower-case codec name, e.g. "h264".

        Raises:
            InvalidInputError: If the source URL is not supported.
            ProbeFailedError: If the engine finished without reporting a
                video codec.
            EngineFailureError: If the run was cancelled; its message is
                "Cancelled".
        """
        source = parse_source(source_url)
        job = Job(kind=JobKind.PROBE, source_url=source_url, options=JobOptions())

        loop = asyncio.get_running_loop()
        found: asyncio.Future[dict[str, Any]] = loop.create_future()
        failures: list[EngineFailureError] = []

        command = (
            self.command_factory(source.engine_input)
            .no_audio()
            .duration(PROBE_DURATION_SECONDS)
            .video_codec("copy")
            .format("null")
            .output("-")
            .with_timeout(self.timeout)
        )

        def on_codec_data(data: dict[str, Any]) -> None:
            if not found.done():
                found.set_result(data)
            # Nothing else is needed from this process
            command.kill("Probe complete")

        def on_error(error: BaseException) -> None:
            failures.append(to_engine_failure(error))

        command.on("codec_data", on_codec_data)
        command.on("error", on_error)

        with job_context(job.id, source_url):
            self.registry.register(job, command)
            job.transition(JobState.PROBING)
            try:
                await self.run(command)
            finally:
                self.registry.remove(job.id)

            if not found.done():
                reason = failures[0].message if failures else None
                if reason == CANCELLED:
                    # Cancellation is reported as is, not as an unknown codec
                    job.fail(reason)
                    logger.info("Codec check of %s cancelled", source_url)
                    raise failures[0]
                job.fail(reason or "no codec data")
                logger.warning("Codec probe failed for %s: %s", source_url, reason)
                raise ProbeFailedError(source_url, reason)

            video = found.result().get("video")
            codec = parse_codec_name(video) if video else None
            if codec is None:
                job.fail("no video stream")
                raise ProbeFailedError(source_url, "no video stream")

            job.codec = codec
            job.transition(JobState.DONE)
            logger.debug("Probed codec of %s: %s (%s)", source_url, codec, video)
            return codec
