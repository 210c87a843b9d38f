"""Unit tests for job context logging."""

from __future__ import annotations

import asyncio
import logging

import pytest

from vjo.logging.context import (
    JobContextFilter,
    clear_job_context,
    get_job_context,
    job_context,
    set_job_context,
)


def make_record() -> logging.LogRecord:
    return logging.LogRecord("vjo.test", logging.INFO, __file__, 1, "msg", (), None)


class TestJobContext:
    """Tests for context propagation."""

    def test_context_manager_restores_previous(self) -> None:
        set_job_context("outer", "file:///a.avi")
        with job_context("inner", "file:///b.avi"):
            assert get_job_context() == ("inner", "file:///b.avi")
        assert get_job_context() == ("outer", "file:///a.avi")
        clear_job_context()
        assert get_job_context() == (None, None)

    @pytest.mark.asyncio
    async def test_concurrent_tasks_are_isolated(self) -> None:
        async def worker(job_id: str) -> str | None:
            with job_context(job_id):
                await asyncio.sleep(0)
                return get_job_context()[0]

        assert await asyncio.gather(worker("a"), worker("b")) == ["a", "b"]


class TestJobContextFilter:
    """Tests for JobContextFilter."""

    def test_adds_job_fields(self) -> None:
        record = make_record()
        with job_context("1a2b3c4d-5e6f", "file:///videos/a.avi"):
            assert JobContextFilter().filter(record) is True

        assert record.job_id == "1a2b3c4d-5e6f"
        assert record.job_source == "file:///videos/a.avi"
        assert record.job_tag == "[job:1a2b3c4d] "

    def test_no_job(self) -> None:
        clear_job_context()
        record = make_record()
        JobContextFilter().filter(record)
        assert record.job_id is None
        assert record.job_tag == ""
