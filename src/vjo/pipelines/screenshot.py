"""Single-frame preview extraction."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from vjo.core.niceness import get_nice_value
from vjo.engine.command import CANCELLED
from vjo.jobs.exceptions import EngineFailureError
from vjo.jobs.models import Job, JobKind, JobState
from vjo.jobs.options import JobOptions, coerce_options
from vjo.logging.context import job_context
from vjo.pipelines.base import EnginePipelineBase, to_engine_failure
from vjo.pipelines.paths import SCREENSHOT_SUFFIX, resolve_paths

logger = logging.getLogger(__name__)


class ScreenshotPipeline(EnginePipelineBase):
    """Extracts the first frame of a video into a PNG next to it.

    Each call is a separate job with a single attempt; concurrent calls
    run independently.
    """

    async def screenshot(
        self,
        source_url: str,
        options: JobOptions | Mapping[str, Any] | None = None,
    ) -> str:
        """Extract a preview frame.

        Args:
            source_url: ``file://`` or ``http(s)://`` source URL.
            options: Job options (``outDir``, ``priority``).

        Returns:
            ``file://`` URL of the written ``<stem>_preview.png``.

        Raises:
            EngineUnavailableError: If the engine never became ready.
            InvalidInputError: If the source URL or options are invalid.
            EngineFailureError: If the engine failed; the message is the
                classified engine diagnostic.
        """
        opts = coerce_options(options)
        job = Job(kind=JobKind.SCREENSHOT, source_url=source_url, options=opts)

        with job_context(job.id, source_url):
            await self.engine.ready()
            paths = resolve_paths(source_url, opts, SCREENSHOT_SUFFIX)
            job.output_path = str(paths.output_path)
            job.output_url = paths.output_url

            command = (
                self.command_factory(paths.input_path)
                .output_options("-y", "-frames:v", "1")
                .output(paths.output_path)
                .renice(get_nice_value(opts.priority))
                .with_timeout(self.timeout)
            )

            outcome: asyncio.Future[str] = asyncio.get_running_loop().create_future()

            def on_end() -> None:
                self._finish(job)
                logger.info("Wrote preview %s", paths.output_path)
                if not outcome.done():
                    outcome.set_result(paths.output_url)

            def on_error(error: BaseException) -> None:
                failure = to_engine_failure(error)
                self._finish(job, failure)
                logger.warning("Screenshot of %s failed: %s", source_url, failure.raw)
                if not outcome.done():
                    outcome.set_exception(failure)

            command.on("end", on_end)
            command.on("error", on_error)
            command.on("progress", self._progress_listener(job))

            self.registry.register(job, command)
            job.transition(JobState.RUNNING)
            try:
                await self.run(command)
            except asyncio.CancelledError:
                if job.id in self.registry:
                    self._finish(job, EngineFailureError(CANCELLED))
                raise
            return await outcome
