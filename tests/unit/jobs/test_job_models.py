"""Unit tests for job data models."""

import pytest

from vjo.engine.progress import EngineProgress
from vjo.jobs.models import Job, JobKind, JobState, ProgressRecord, new_job_id
from vjo.jobs.options import JobOptions


def make_job(kind: JobKind = JobKind.SCREENSHOT) -> Job:
    return Job(kind=kind, source_url="file:///videos/a.avi", options=JobOptions())


class TestJobTransitions:
    """Tests for Job.transition() and Job.fail()."""

    def test_starts_created(self) -> None:
        job = make_job()
        assert job.state == JobState.CREATED
        assert job.finished_at is None

    def test_conversion_lifecycle(self) -> None:
        job = make_job(JobKind.CONVERSION)
        job.transition(JobState.PROBING)
        job.transition(JobState.RUNNING)
        job.transition(JobState.DONE)
        assert job.state.is_terminal
        assert job.finished_at is not None

    def test_cannot_go_backwards(self) -> None:
        job = make_job()
        job.transition(JobState.RUNNING)
        with pytest.raises(ValueError, match="invalid transition"):
            job.transition(JobState.PROBING)

    def test_terminal_is_final(self) -> None:
        job = make_job()
        job.transition(JobState.RUNNING)
        job.transition(JobState.DONE)
        with pytest.raises(ValueError):
            job.transition(JobState.FAILED)

    def test_fail_records_message(self) -> None:
        job = make_job()
        job.transition(JobState.RUNNING)
        job.fail("No such file or directory")
        assert job.state == JobState.FAILED
        assert job.error == "No such file or directory"

    def test_fail_after_done_is_ignored(self) -> None:
        job = make_job()
        job.transition(JobState.RUNNING)
        job.transition(JobState.DONE)
        job.fail("late error")
        assert job.state == JobState.DONE
        assert job.error is None


class TestJobIds:
    """Tests for job id generation."""

    def test_ids_are_unique(self) -> None:
        assert len({new_job_id() for _ in range(100)}) == 100

    def test_each_job_gets_own_id(self) -> None:
        assert make_job().id != make_job().id


class TestProgressRecord:
    """Tests for ProgressRecord."""

    def test_from_engine(self) -> None:
        progress = EngineProgress(
            frame=10, fps=25.0, out_time_us=2_500_000, speed="1.5x", percent=25.0
        )
        record = ProgressRecord.from_engine(progress)
        assert record.percent == 25.0
        assert record.frame == 10
        assert record.out_time_seconds == 2.5
        assert record.speed == "1.5x"
        assert record.updated_at is not None

    def test_copy_is_independent(self) -> None:
        record = ProgressRecord(percent=10.0)
        copy = record.copy()
        copy.percent = 90.0
        assert record.percent == 10.0
