"""Base class for pipelines that drive the engine.

Provides the shared collaborators (readiness gate, job registry, command
factory), registry bookkeeping for a job's terminal state, and error
classification for engine failures.
"""

from __future__ import annotations

import logging
from abc import ABC
from collections.abc import Callable
from typing import TYPE_CHECKING

from vjo.engine.command import EngineCommand
from vjo.engine.diagnostics import classify_error
from vjo.jobs.exceptions import EngineFailureError, JobNotFoundError
from vjo.jobs.models import Job, JobState, ProgressRecord

if TYPE_CHECKING:
    from vjo.engine.progress import EngineProgress
    from vjo.engine.support import ReadinessGate
    from vjo.jobs.registry import JobRegistry

logger = logging.getLogger(__name__)

CommandFactory = Callable[[str], EngineCommand]


def to_engine_failure(error: BaseException) -> EngineFailureError:
    """Wrap an engine error with its classified message.

    Args:
        error: Error reported by the engine process.

    Returns:
        EngineFailureError whose message is the classified raw text.
    """
    raw = getattr(error, "raw", None) or str(error)
    return EngineFailureError(
        classify_error(raw),
        raw=raw,
        exit_code=getattr(error, "exit_code", None),
    )


class EnginePipelineBase(ABC):
    """Shared plumbing for engine-driven pipelines.

    Subclasses implement their own public operation.
    """

    def __init__(
        self,
        engine: ReadinessGate,
        registry: JobRegistry,
        command_factory: CommandFactory,
        timeout: float | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            engine: Readiness gate awaited before any engine invocation.
            registry: Registry of in-flight jobs.
            command_factory: Creates an EngineCommand for an input path/URL.
            timeout: Engine timeout in seconds. None or 0 means no limit.
        """
        self.engine = engine
        self.registry = registry
        self.command_factory = command_factory
        self.timeout = timeout or None

    async def run(self, command: EngineCommand) -> int | None:
        """Run an engine command to completion."""
        return await command.run()

    def _progress_listener(
        self, job: Job, forward: Callable[[ProgressRecord], None] | None = None
    ) -> Callable[[EngineProgress], None]:
        """Build the progress callback that owns the job's progress slot."""

        def on_progress(progress: EngineProgress) -> None:
            record = ProgressRecord.from_engine(progress)
            self.registry.update_progress(job.id, record)
            if forward is not None:
                forward(record)

        return on_progress

    def _finish(self, job: Job, error: EngineFailureError | None = None) -> None:
        """Move a job to its terminal state and drop it from the registry."""
        if error is None:
            job.transition(JobState.DONE)
        else:
            job.fail(error.message)
        try:
            self.registry.remove(job.id)
        except JobNotFoundError:
            logger.debug("Job %s was not registered", job.id)
