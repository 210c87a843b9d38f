"""In-memory registry of in-flight jobs.

Maps job id to the job, its engine process and its last progress record.
Entries are inserted when a job's process starts and removed when the job
reaches a terminal state. Removed ids are remembered so they cannot be
registered again. Only the most recent RETIRED_ID_LIMIT ids are kept.
Job ids are random UUIDs, so an evicted id is not generated again.

The registry is used from a single event loop thread and each entry is
only written by its own job's callbacks, so no locking is needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from vjo.jobs.exceptions import DuplicateJobError, JobNotFoundError
from vjo.jobs.models import Job, ProgressRecord

if TYPE_CHECKING:
    from vjo.engine.command import EngineCommand

logger = logging.getLogger(__name__)

# Number of removed job ids remembered for duplicate detection
RETIRED_ID_LIMIT = 4096


@dataclass
class JobEntry:
    """Registry slot for one job."""

    job: Job
    process: EngineCommand
    progress: ProgressRecord = field(default_factory=ProgressRecord)


class JobRegistry:
    """Per-job process handles and progress records."""

    def __init__(self, retired_limit: int = RETIRED_ID_LIMIT) -> None:
        self._entries: dict[str, JobEntry] = {}
        # Insertion ordered, oldest first
        self._retired: dict[str, None] = {}
        self._retired_limit = retired_limit
        # Reserved for multi-segment jobs, not populated yet
        self.segments: dict[str, Any] = {}

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def register(self, job: Job, process: EngineCommand) -> JobEntry:
        """Insert a job and its process handle.

        Raises:
            DuplicateJobError: If the id is active or was recently retired.
        """
        if job.id in self._entries or job.id in self._retired:
            raise DuplicateJobError(job.id)
        entry = JobEntry(job=job, process=process)
        self._entries[job.id] = entry
        logger.debug("Registered %s job %s", job.kind.value, job.id)
        return entry

    def _get(self, job_id: str, operation: str) -> JobEntry:
        entry = self._entries.get(job_id)
        if entry is None:
            raise JobNotFoundError(job_id, operation)
        return entry

    def get_job(self, job_id: str) -> Job:
        return self._get(job_id, "get").job

    def get_process(self, job_id: str) -> EngineCommand:
        return self._get(job_id, "get process of").process

    def get_progress(self, job_id: str) -> ProgressRecord:
        """Get a snapshot of a job's progress.

        Raises:
            JobNotFoundError: If the job is unknown or already finished.
        """
        return self._get(job_id, "get progress of").progress.copy()

    def update_progress(self, job_id: str, progress: ProgressRecord) -> None:
        self._get(job_id, "update progress of").progress = progress

    def remove(self, job_id: str) -> JobEntry:
        """Remove a finished job and retire its id.

        Raises:
            JobNotFoundError: If the job is unknown or already removed.
        """
        entry = self._entries.pop(job_id, None)
        if entry is None:
            raise JobNotFoundError(job_id, "remove")
        self._retire(job_id)
        self.segments.pop(job_id, None)
        logger.debug("Removed %s job %s", entry.job.kind.value, job_id)
        return entry

    def active_ids(self) -> list[str]:
        return list(self._entries)

    def _retire(self, job_id: str) -> None:
        self._retired[job_id] = None
        while len(self._retired) > self._retired_limit:
            del self._retired[next(iter(self._retired))]
