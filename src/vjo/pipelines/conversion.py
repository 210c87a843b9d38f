"""Conversion of videos to MP4/H.264.

Two strategies produce the same container:

- fast: stream copy (remux). No re-encoding, minimal CPU, original
  quality. Used when the probed video codec already is H.264.
- slow: full re-encode. Works for any input codec.

Conversion reports through a ConversionHandle instead of a return value;
see ``vjo.pipelines.events``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from vjo.config.models import ConversionConfig
from vjo.core.niceness import get_nice_value
from vjo.engine.command import CANCELLED
from vjo.jobs.exceptions import EngineFailureError, ProbeFailedError, VJOError
from vjo.jobs.models import Job, JobKind, JobState, new_job_id
from vjo.jobs.options import JobOptions, coerce_options
from vjo.logging.context import job_context
from vjo.pipelines.base import CommandFactory, EnginePipelineBase, to_engine_failure
from vjo.pipelines.events import (
    CONVERSION_DONE,
    CONVERSION_ERROR,
    CONVERSION_PROGRESS,
    ConversionHandle,
)
from vjo.pipelines.paths import parse_source, resolve_paths

if TYPE_CHECKING:
    from vjo.engine.support import ReadinessGate
    from vjo.jobs.registry import JobRegistry
    from vjo.pipelines.probe import CodecProber

logger = logging.getLogger(__name__)

# Inputs in this codec take the fast path
FAST_PATH_CODEC = "h264"

STRATEGY_FAST = "fast"
STRATEGY_SLOW = "slow"

# ffmpeg muxer names for supported output containers
CONTAINER_FORMATS = {"mp4": "mp4", "mov": "mov"}


class ConversionPipeline(EnginePipelineBase):
    """Converts a source into an MP4 next to it (or in ``outDir``)."""

    def __init__(
        self,
        engine: ReadinessGate,
        registry: JobRegistry,
        command_factory: CommandFactory,
        prober: CodecProber,
        config: ConversionConfig | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            engine: Readiness gate awaited before any engine invocation.
            registry: Registry of in-flight jobs.
            command_factory: Creates an EngineCommand for an input path/URL.
            prober: Codec prober used to pick the strategy.
            config: Encoder settings. None uses defaults.
            timeout: Conversion timeout in seconds. None or 0 means no limit.
        """
        super().__init__(engine, registry, command_factory, timeout)
        self.prober = prober
        self.config = config or ConversionConfig()
        # Conversions whose engine process is not registered yet
        self._pending: dict[str, ConversionHandle] = {}

    def convert_to_file(
        self,
        source_url: str,
        options: JobOptions | Mapping[str, Any] | None = None,
    ) -> ConversionHandle:
        """Start a conversion.

        Must be called while an event loop is running. All work happens in
        a background task; every outcome, including readiness failures and
        invalid input, is reported through the returned handle.

        Args:
            source_url: ``file://`` or ``http(s)://`` source URL.
            options: Job options (``outDir``, ``enforceSlow``, ``priority``).

        Returns:
            Handle emitting ``conversion.done`` or ``conversion.error``.
        """
        handle = ConversionHandle(new_job_id())
        handle.task = asyncio.get_running_loop().create_task(
            self._convert(handle, source_url, options),
            name=f"conversion-{handle.job_id}",
        )
        handle.task.add_done_callback(lambda task: self._settle(handle, task))
        self._pending[handle.job_id] = handle
        return handle

    def pending_ids(self) -> list[str]:
        """Ids of conversions that have not started their engine run yet."""
        return list(self._pending)

    def cancel_pending(self, job_id: str) -> bool:
        """Cancel a conversion that is still before its engine run.

        Covers the readiness wait and the codec check, where the
        conversion has no registered process of its own.

        Returns:
            True if a pending conversion was cancelled.
        """
        handle = self._pending.pop(job_id, None)
        if handle is None or handle.task is None:
            return False
        handle.task.cancel()
        return True

    def _settle(self, handle: ConversionHandle, task: asyncio.Task[None]) -> None:
        """Report a conversion task cancelled before it could emit an event."""
        self._pending.pop(handle.job_id, None)
        if task.cancelled() and not handle.done:
            handle.emit(CONVERSION_ERROR, EngineFailureError(CANCELLED))

    async def get_codec(self, source_url: str) -> str:
        """Probe the video codec of a source."""
        return await self.prober.probe(source_url)

    async def _convert(
        self,
        handle: ConversionHandle,
        source_url: str,
        options: JobOptions | Mapping[str, Any] | None,
    ) -> None:
        job: Job | None = None
        with job_context(handle.job_id, source_url):
            try:
                opts = coerce_options(options)
                job = Job(
                    kind=JobKind.CONVERSION,
                    source_url=source_url,
                    options=opts,
                    id=handle.job_id,
                )
                await self.engine.ready()
                parse_source(source_url)

                if opts.enforce_slow:
                    strategy = self.convert_slow
                else:
                    job.transition(JobState.PROBING)
                    try:
                        job.codec = await self.get_codec(source_url)
                    except ProbeFailedError as e:
                        logger.warning("%s, re-encoding", e.message)
                    if job.codec == FAST_PATH_CODEC:
                        strategy = self.convert_fast
                    else:
                        strategy = self.convert_slow

                # The strategy registers its own process from here on
                self._pending.pop(handle.job_id, None)
                await strategy(handle, job)
            except asyncio.CancelledError:
                self._fail_unfinished(handle, job, EngineFailureError(CANCELLED))
                raise
            except VJOError as e:
                self._fail_unfinished(handle, job, e)
            except Exception as e:
                logger.exception("Conversion of %s failed unexpectedly", source_url)
                self._fail_unfinished(handle, job, e)

    def _fail_unfinished(
        self, handle: ConversionHandle, job: Job | None, error: Exception
    ) -> None:
        """Report an error raised outside the engine callbacks."""
        self._pending.pop(handle.job_id, None)
        if job is not None:
            if job.id in self.registry:
                self.registry.remove(job.id)
            job.fail(getattr(error, "message", None) or str(error))
        if not handle.done:
            logger.warning("Conversion failed: %s", error)
            handle.emit(CONVERSION_ERROR, error)

    async def convert_fast(self, handle: ConversionHandle, job: Job) -> None:
        """Remux into the target container without re-encoding."""
        await self._run_strategy(
            handle,
            job,
            STRATEGY_FAST,
            ["-c", "copy"],
        )

    async def convert_slow(self, handle: ConversionHandle, job: Job) -> None:
        """Re-encode to H.264 video and AAC audio."""
        cfg = self.config
        await self._run_strategy(
            handle,
            job,
            STRATEGY_SLOW,
            [
                "-c:v",
                cfg.video_encoder,
                "-preset",
                cfg.preset,
                "-crf",
                str(cfg.crf),
                "-pix_fmt",
                cfg.pixel_format,
                "-c:a",
                cfg.audio_encoder,
                "-b:a",
                cfg.audio_bitrate,
            ],
        )

    async def _run_strategy(
        self,
        handle: ConversionHandle,
        job: Job,
        strategy: str,
        codec_options: list[str],
    ) -> None:
        """Run one conversion strategy and report its outcome on the handle."""
        container = self.config.container
        paths = resolve_paths(job.source_url, job.options, f".{container}")
        job.strategy = strategy
        job.output_path = str(paths.output_path)
        job.output_url = paths.output_url

        command = (
            self.command_factory(paths.input_path)
            .output_options(
                "-y",
                # First video stream and any audio; other streams may not fit
                "-map",
                "0:v:0",
                "-map",
                "0:a?",
                *codec_options,
                "-movflags",
                "+faststart",
                "-f",
                CONTAINER_FORMATS[container],
            )
            .output(paths.output_path)
            .renice(get_nice_value(job.options.priority))
            .with_timeout(self.timeout)
        )

        def on_end() -> None:
            self._finish(job)
            logger.info("Converted %s (%s path)", paths.output_path, strategy)
            handle.emit(CONVERSION_DONE, paths.output_url)

        def on_error(error: BaseException) -> None:
            failure = to_engine_failure(error)
            self._finish(job, failure)
            logger.warning("Conversion (%s path) failed: %s", strategy, failure.raw)
            handle.emit(CONVERSION_ERROR, failure)

        command.on("end", on_end)
        command.on("error", on_error)
        command.on(
            "progress",
            self._progress_listener(
                job, lambda record: handle.emit(CONVERSION_PROGRESS, record)
            ),
        )

        self.registry.register(job, command)
        job.transition(JobState.RUNNING)
        logger.info(
            "Converting %s to %s (%s path)", job.source_url, paths.output_path, strategy
        )
        await self.run(command)
