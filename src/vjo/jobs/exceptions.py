"""Custom exceptions for video jobs.

This module provides specific exception types for job operations,
enabling callers to handle different error conditions appropriately.
"""


class VJOError(Exception):
    """Base exception for all job errors.

    Every error surfaced by a pipeline carries a human-readable
    ``message`` attribute.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class EngineUnavailableError(VJOError):
    """Raised when the engine never became ready.

    Attributes:
        reason: Why the engine could not be used (missing binary, failed
            version check).
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Video engine is not available: {reason}")


class InvalidInputError(VJOError):
    """Raised for unsupported source URLs or invalid job options."""


class ProbeFailedError(VJOError):
    """Raised when the codec probe completed without codec information.

    Attributes:
        source_url: The source that was probed.
        reason: Classified engine error, if the engine reported one.
    """

    def __init__(self, source_url: str, reason: str | None = None) -> None:
        self.source_url = source_url
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Could not determine codec of {source_url}{detail}")


class EngineFailureError(VJOError):
    """Raised when an engine process fails during a job.

    The message is always the classified form of the engine diagnostic,
    the unclassified text is kept in ``raw``.

    Attributes:
        raw: Raw diagnostic text reported by the engine.
        exit_code: Process exit code, or None if it never exited normally.
    """

    def __init__(
        self,
        message: str,
        raw: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        self.raw = raw if raw is not None else message
        self.exit_code = exit_code
        super().__init__(message)


class JobNotFoundError(VJOError):
    """Raised when a job id is unknown or the job has already finished.

    Attributes:
        job_id: The ID of the job that was not found.
        operation: The operation that was attempted (e.g., "cancel").
    """

    def __init__(self, job_id: str, operation: str) -> None:
        self.job_id = job_id
        self.operation = operation
        super().__init__(f"Cannot {operation} job {job_id}: not found")


class DuplicateJobError(VJOError):
    """Raised when a job id is registered twice.

    Job ids are never reused, including ids of jobs that already finished.

    Attributes:
        job_id: The ID that was registered again.
    """

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job {job_id} is already registered or has finished")
