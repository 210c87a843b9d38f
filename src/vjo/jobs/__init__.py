"""Video job models, options, errors and the in-flight job registry."""

from vjo.jobs.exceptions import (
    DuplicateJobError,
    EngineFailureError,
    EngineUnavailableError,
    InvalidInputError,
    JobNotFoundError,
    ProbeFailedError,
    VJOError,
)
from vjo.jobs.models import Job, JobKind, JobState, ProgressRecord, new_job_id
from vjo.jobs.options import JobOptions, coerce_options
from vjo.jobs.registry import JobEntry, JobRegistry

__all__ = [
    "DuplicateJobError",
    "EngineFailureError",
    "EngineUnavailableError",
    "InvalidInputError",
    "Job",
    "JobEntry",
    "JobKind",
    "JobNotFoundError",
    "JobOptions",
    "JobRegistry",
    "JobState",
    "ProbeFailedError",
    "ProgressRecord",
    "VJOError",
    "coerce_options",
    "new_job_id",
]
