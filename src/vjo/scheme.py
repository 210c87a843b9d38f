"""VideoScheme: the entry point for screenshot and conversion jobs.

Wires the engine readiness gate, the job registry and the pipelines
together. The engine support object is injected, so tests (and embedding
applications with their own engine setup) can substitute it.

Example:
    scheme = VideoScheme()
    scheme.init_engine()
    preview = await scheme.screenshot("file:///videos/clip.avi")
    handle = scheme.convert_to_file("file:///videos/clip.avi", {"priority": 25})
    output = await handle.wait()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from vjo.config.models import VJOConfig
from vjo.core.niceness import get_nice_value
from vjo.engine.command import CANCELLED, EngineCommand
from vjo.engine.support import EngineSupport, ReadinessGate
from vjo.jobs.models import Job, ProgressRecord
from vjo.jobs.options import JobOptions
from vjo.jobs.registry import JobRegistry
from vjo.pipelines.base import CommandFactory
from vjo.pipelines.conversion import ConversionPipeline
from vjo.pipelines.events import ConversionHandle
from vjo.pipelines.probe import CodecProber
from vjo.pipelines.screenshot import ScreenshotPipeline

logger = logging.getLogger(__name__)


class VideoScheme:
    """Orchestrates video jobs against one engine."""

    def __init__(
        self,
        engine: ReadinessGate | None = None,
        config: VJOConfig | None = None,
        command_factory: CommandFactory | None = None,
        registry: JobRegistry | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            engine: Engine support exposing ``init()`` and ``async ready()``.
                None creates an EngineSupport using the configured ffmpeg.
            config: Configuration. None uses defaults.
            command_factory: Creates engine commands. None runs ffmpeg.
            registry: Job registry. None creates an empty one.
        """
        self.config = config or VJOConfig()
        self.engine = engine or EngineSupport(configured_path=self.config.tools.ffmpeg)
        self.registry = registry or JobRegistry()
        factory = command_factory or self._default_command_factory
        jobs = self.config.jobs

        self.prober = CodecProber(
            self.engine, self.registry, factory, timeout=jobs.probe_timeout
        )
        self.screenshots = ScreenshotPipeline(
            self.engine, self.registry, factory, timeout=jobs.screenshot_timeout
        )
        self.conversion = ConversionPipeline(
            self.engine,
            self.registry,
            factory,
            prober=self.prober,
            config=self.config.conversion,
            timeout=jobs.conversion_timeout,
        )

    def _default_command_factory(self, source: str) -> EngineCommand:
        ffmpeg_path = (
            getattr(self.engine, "ffmpeg_path", None)
            or self.config.tools.ffmpeg
            or "ffmpeg"
        )
        return EngineCommand(source, ffmpeg_path=ffmpeg_path)

    def init_engine(self) -> None:
        """Start engine setup. Safe to call more than once."""
        self.engine.init()

    @staticmethod
    def get_nice_value(percent: float | None = None) -> int:
        """Map a 0-100 priority percentage to an OS niceness."""
        return get_nice_value(percent)

    async def screenshot(
        self,
        source_url: str,
        options: JobOptions | Mapping[str, Any] | None = None,
    ) -> str:
        """Extract a preview frame; see ScreenshotPipeline.screenshot."""
        return await self.screenshots.screenshot(source_url, options)

    def convert_to_file(
        self,
        source_url: str,
        options: JobOptions | Mapping[str, Any] | None = None,
    ) -> ConversionHandle:
        """Start a conversion; see ConversionPipeline.convert_to_file."""
        return self.conversion.convert_to_file(source_url, options)

    async def get_codec(self, source_url: str) -> str:
        """Probe the video codec of a source after the engine is ready."""
        await self.engine.ready()
        return await self.prober.probe(source_url)

    def get_progress(self, job_id: str) -> ProgressRecord:
        """Get the last progress of an in-flight job.

        Raises:
            JobNotFoundError: If the job is unknown or already finished.
        """
        return self.registry.get_progress(job_id)

    def get_job(self, job_id: str) -> Job:
        return self.registry.get_job(job_id)

    def active_jobs(self) -> list[str]:
        """Ids of in-flight jobs, including conversions not yet encoding."""
        return [*self.conversion.pending_ids(), *self.registry.active_ids()]

    def cancel(self, job_id: str) -> None:
        """Kill the engine process of an in-flight job.

        The job then fails through its normal error path with the message
        "Cancelled". A conversion can be cancelled by its handle id in
        every phase, including while its codec is being detected.

        Raises:
            JobNotFoundError: If the job is unknown or already finished.
        """
        if self.conversion.cancel_pending(job_id):
            logger.info("Cancelling conversion %s", job_id)
            return
        process = self.registry.get_process(job_id)
        logger.info("Cancelling job %s", job_id)
        process.kill(CANCELLED)
