"""Shared test fixtures for Video Job Orchestrator."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from vjo.config.models import VJOConfig
from vjo.engine.command import CANCELLED, EngineCommand
from vjo.jobs.exceptions import EngineFailureError
from vjo.jobs.registry import JobRegistry
from vjo.scheme import VideoScheme

Script = Iterable[tuple[str, Any]]


class FakeCommand(EngineCommand):
    """EngineCommand that replays scripted engine events instead of ffmpeg.

    A script is a list of ``(event, payload)`` tuples. ``end`` and ``error``
    finish the run. A kill during the script ends it with an error carrying
    the kill reason, like the real process would.
    """

    def __init__(self, source: str, script: Script) -> None:
        super().__init__(source, ffmpeg_path="ffmpeg")
        self.script = list(script)
        self.ran = False

    async def run(self) -> int | None:
        self.ran = True
        self._emit("start", " ".join(self.build_args()))
        for event, payload in self.script:
            try:
                await asyncio.sleep(0)
            except asyncio.CancelledError:
                self.kill(CANCELLED)
                raise
            if self._kill_reason is not None:
                break
            if event == "end":
                self._emit("end")
                return 0
            if event == "error":
                self._emit("error", payload)
                return 1
            if event == "codec_data":
                self.codec_data.update(payload)
            self._emit(event, payload)
        if self._kill_reason is not None:
            self._emit(
                "error", EngineFailureError(self._kill_reason, raw=self._kill_reason)
            )
            return -9
        self._emit("end")
        return 0


class FakeCommandFactory:
    """Command factory handing out FakeCommands.

    Scripts are used in order; the last one is reused once the others
    are consumed.
    """

    def __init__(self, *scripts: Script) -> None:
        self.scripts = [list(s) for s in scripts] or [[("end", None)]]
        self.commands: list[FakeCommand] = []

    def __call__(self, source: str) -> FakeCommand:
        script = self.scripts.pop(0) if len(self.scripts) > 1 else self.scripts[0]
        command = FakeCommand(source, script)
        self.commands.append(command)
        return command

    @property
    def last(self) -> FakeCommand:
        return self.commands[-1]


@pytest.fixture
def fake_engine() -> MagicMock:
    """Engine support stub that is always ready."""
    engine = MagicMock()
    engine.init = MagicMock()
    engine.ready = AsyncMock(return_value=True)
    engine.ffmpeg_path = None
    return engine


@pytest.fixture
def registry() -> JobRegistry:
    return JobRegistry()


@pytest.fixture
def make_scheme(fake_engine: MagicMock, registry: JobRegistry):
    """Build a VideoScheme around a FakeCommandFactory with the given scripts."""

    def _make(*scripts: Script, config: VJOConfig | None = None) -> VideoScheme:
        return VideoScheme(
            engine=fake_engine,
            config=config,
            command_factory=FakeCommandFactory(*scripts),
            registry=registry,
        )

    return _make
