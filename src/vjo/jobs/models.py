"""Job data models.

A job is one screenshot, probe or conversion request. Its state only moves
forward along ``created -> probing -> running -> done | failed``; terminal
states are final.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vjo.engine.progress import EngineProgress
    from vjo.jobs.options import JobOptions


class JobKind(Enum):
    """Kind of work a job performs."""

    SCREENSHOT = "screenshot"
    PROBE = "probe"
    CONVERSION = "conversion"


class JobState(Enum):
    """Lifecycle state of a job."""

    CREATED = "created"
    PROBING = "probing"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.DONE, JobState.FAILED)


_ALLOWED_TRANSITIONS: dict[JobState, frozenset[JobState]] = {
    JobState.CREATED: frozenset(
        {JobState.PROBING, JobState.RUNNING, JobState.FAILED}
    ),
    JobState.PROBING: frozenset({JobState.RUNNING, JobState.DONE, JobState.FAILED}),
    JobState.RUNNING: frozenset({JobState.DONE, JobState.FAILED}),
    JobState.DONE: frozenset(),
    JobState.FAILED: frozenset(),
}


def new_job_id() -> str:
    """Generate a fresh job id."""
    return str(uuid.uuid4())


@dataclass
class ProgressRecord:
    """Last progress reported by the engine for one job."""

    percent: float | None = None
    frame: int | None = None
    fps: float | None = None
    out_time_seconds: float | None = None
    speed: str | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_engine(cls, progress: EngineProgress) -> ProgressRecord:
        """Build a record from an engine progress sample."""
        return cls(
            percent=progress.percent,
            frame=progress.frame,
            fps=progress.fps,
            out_time_seconds=progress.out_time_seconds,
            speed=progress.speed,
            updated_at=datetime.now(timezone.utc),
        )

    def copy(self) -> ProgressRecord:
        return replace(self)


@dataclass
class Job:
    """A single video job.

    Attributes:
        kind: What the job does.
        source_url: The source URL as given by the caller.
        options: Validated job options.
        id: Opaque job identifier, never reused.
        output_path: Resolved output location, once known.
        output_url: ``file://`` URL of the output, once known.
        codec: Probed video codec (conversion jobs).
        strategy: "fast" or "slow" (conversion jobs).
        error: Classified error message for failed jobs.
    """

    kind: JobKind
    source_url: str
    options: JobOptions
    id: str = field(default_factory=new_job_id)
    state: JobState = JobState.CREATED
    output_path: str | None = None
    output_url: str | None = None
    codec: str | None = None
    strategy: str | None = None
    error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    def transition(self, state: JobState) -> None:
        """Move the job to a new state.

        Args:
            state: Target state.

        Raises:
            ValueError: If the transition is not allowed (for example out of
                a terminal state).
        """
        if state not in _ALLOWED_TRANSITIONS[self.state]:
            raise ValueError(
                f"Job {self.id}: invalid transition {self.state.value} -> "
                f"{state.value}"
            )
        self.state = state
        if state.is_terminal:
            self.finished_at = datetime.now(timezone.utc)

    def fail(self, message: str) -> None:
        """Mark the job failed, unless it already reached a terminal state."""
        if self.state.is_terminal:
            return
        self.error = message
        self.transition(JobState.FAILED)
