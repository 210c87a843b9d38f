"""Unit tests for JobRegistry."""

from unittest.mock import MagicMock

import pytest

from vjo.jobs.exceptions import DuplicateJobError, JobNotFoundError
from vjo.jobs.models import Job, JobKind, ProgressRecord
from vjo.jobs.options import JobOptions
from vjo.jobs.registry import JobRegistry


@pytest.fixture
def job() -> Job:
    return Job(
        kind=JobKind.CONVERSION,
        source_url="file:///videos/a.avi",
        options=JobOptions(),
    )


class TestJobRegistry:
    """Tests for registry bookkeeping."""

    def test_register_and_lookup(self, registry: JobRegistry, job: Job) -> None:
        process = MagicMock()
        registry.register(job, process)

        assert job.id in registry
        assert len(registry) == 1
        assert registry.get_job(job.id) is job
        assert registry.get_process(job.id) is process
        assert registry.active_ids() == [job.id]

    def test_progress_starts_empty(self, registry: JobRegistry, job: Job) -> None:
        registry.register(job, MagicMock())
        assert registry.get_progress(job.id) == ProgressRecord()

    def test_update_progress(self, registry: JobRegistry, job: Job) -> None:
        registry.register(job, MagicMock())
        registry.update_progress(job.id, ProgressRecord(percent=42.0))
        assert registry.get_progress(job.id).percent == 42.0

    def test_get_progress_returns_snapshot(
        self, registry: JobRegistry, job: Job
    ) -> None:
        """Mutating a returned record does not touch the registry."""
        registry.register(job, MagicMock())
        registry.update_progress(job.id, ProgressRecord(percent=10.0))
        snapshot = registry.get_progress(job.id)
        snapshot.percent = 99.0
        assert registry.get_progress(job.id).percent == 10.0

    def test_remove(self, registry: JobRegistry, job: Job) -> None:
        registry.register(job, MagicMock())
        registry.remove(job.id)

        assert job.id not in registry
        with pytest.raises(JobNotFoundError, match="not found"):
            registry.get_progress(job.id)

    def test_remove_twice_raises(self, registry: JobRegistry, job: Job) -> None:
        registry.register(job, MagicMock())
        registry.remove(job.id)
        with pytest.raises(JobNotFoundError):
            registry.remove(job.id)

    def test_duplicate_registration(self, registry: JobRegistry, job: Job) -> None:
        registry.register(job, MagicMock())
        with pytest.raises(DuplicateJobError):
            registry.register(job, MagicMock())

    def test_finished_ids_are_never_reused(
        self, registry: JobRegistry, job: Job
    ) -> None:
        registry.register(job, MagicMock())
        registry.remove(job.id)
        with pytest.raises(DuplicateJobError):
            registry.register(job, MagicMock())

    def test_unknown_job(self, registry: JobRegistry) -> None:
        with pytest.raises(JobNotFoundError) as exc_info:
            registry.get_job("nope")
        assert exc_info.value.job_id == "nope"
        assert exc_info.value.operation == "get"


class TestRetiredIds:
    """Tests for the bounded memory of removed job ids."""

    @staticmethod
    def make_job() -> Job:
        return Job(
            kind=JobKind.SCREENSHOT,
            source_url="file:///videos/a.avi",
            options=JobOptions(),
        )

    def test_oldest_retired_id_is_forgotten(self) -> None:
        registry = JobRegistry(retired_limit=2)
        jobs = [self.make_job() for _ in range(3)]
        for job in jobs:
            registry.register(job, MagicMock())
            registry.remove(job.id)

        # The oldest id fell out of the retired set
        registry.register(jobs[0], MagicMock())
        for job in jobs[1:]:
            with pytest.raises(DuplicateJobError):
                registry.register(job, MagicMock())

    def test_default_limit_holds_many_ids(self, registry: JobRegistry) -> None:
        first = self.make_job()
        registry.register(first, MagicMock())
        registry.remove(first.id)
        for _ in range(100):
            job = self.make_job()
            registry.register(job, MagicMock())
            registry.remove(job.id)

        with pytest.raises(DuplicateJobError):
            registry.register(first, MagicMock())
