"""Event-driven ffmpeg command runner.

An EngineCommand is built fluently (input options, output options, output
target) and then run as an asyncio subprocess. While running it turns the
engine's stderr into events that pipelines subscribe to with ``on()``:

- ``start``: the full command line (str), once the process is spawned
- ``codec_data``: dict of input stream descriptions, e.g.
  ``{"video": "h264 (High)", "audio": "aac (LC)", "duration": 12.5}``
- ``progress``: an EngineProgress sample, with ``percent`` filled when the
  input duration is known
- ``end``: no payload, process exited with code 0
- ``error``: an EngineFailureError whose message is already classified

Exactly one of ``end`` or ``error`` is emitted per run.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections import defaultdict, deque
from collections.abc import Callable
from pathlib import Path
from typing import Any

from vjo.core.niceness import apply_niceness
from vjo.engine.diagnostics import classify_error, last_diagnostic_line
from vjo.engine.progress import (
    EngineProgress,
    parse_duration,
    parse_stderr_progress,
    parse_stream_codec,
)
from vjo.jobs.exceptions import EngineFailureError

logger = logging.getLogger(__name__)

EVENTS = frozenset({"start", "codec_data", "progress", "end", "error"})

# Kill reason used for caller-requested cancellation
CANCELLED = "Cancelled"

# Number of stderr lines kept for error reporting
STDERR_TAIL_LINES = 200

_LINE_SPLIT = re.compile(r"\r\n|\r|\n")


class EngineCommand:
    """A single ffmpeg invocation with event callbacks.

    Example:
        command = (
            EngineCommand("/videos/clip.avi", ffmpeg_path="/usr/bin/ffmpeg")
            .output_options("-frames:v", "1")
            .output("/videos/clip_preview.png")
            .on("end", lambda: print("done"))
        )
        await command.run()
    """

    READ_CHUNK_SIZE: int = 4096

    def __init__(self, source: str, ffmpeg_path: Path | str = "ffmpeg") -> None:
        """Initialize the command.

        Args:
            source: Input file path or URL, passed to ffmpeg unchanged.
            ffmpeg_path: Path to the ffmpeg executable.
        """
        self.source = source
        self.ffmpeg_path = str(ffmpeg_path)
        self.niceness = 0
        self.timeout: float | None = None
        self.codec_data: dict[str, Any] = {}
        self.stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        self._input_options: list[str] = []
        self._output_options: list[str] = []
        self._output: str | None = None
        self._handlers: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self._process: asyncio.subprocess.Process | None = None
        self._kill_reason: str | None = None
        self._section: str | None = None
        self._codec_data_emitted = False

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def on(self, event: str, callback: Callable[..., Any]) -> EngineCommand:
        """Subscribe to an engine event."""
        if event not in EVENTS:
            raise ValueError(f"Unknown engine event: {event}")
        self._handlers[event].append(callback)
        return self

    def input_options(self, *options: str) -> EngineCommand:
        self._input_options.extend(options)
        return self

    def output_options(self, *options: str) -> EngineCommand:
        self._output_options.extend(options)
        return self

    def output(self, target: Path | str) -> EngineCommand:
        self._output = str(target)
        return self

    def no_audio(self) -> EngineCommand:
        return self.output_options("-an")

    def video_codec(self, codec: str) -> EngineCommand:
        return self.output_options("-c:v", codec)

    def duration(self, seconds: float) -> EngineCommand:
        """Limit the amount of input that is processed."""
        return self.output_options("-t", f"{seconds:g}")

    def format(self, fmt: str) -> EngineCommand:
        return self.output_options("-f", fmt)

    def renice(self, value: int) -> EngineCommand:
        """Set the niceness applied to the process once it is spawned."""
        self.niceness = value
        return self

    def with_timeout(self, seconds: float | None) -> EngineCommand:
        """Kill the process if it runs longer than ``seconds``.

        Args:
            seconds: Timeout in seconds. None or 0 disables the timeout.
        """
        self.timeout = seconds if seconds else None
        return self

    def build_args(self) -> list[str]:
        """Build the full ffmpeg argument list."""
        if self._output is None:
            raise ValueError("No output configured for engine command")
        return [
            self.ffmpeg_path,
            "-hide_banner",
            "-nostdin",
            *self._input_options,
            "-i",
            self.source,
            *self._output_options,
            self._output,
        ]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    def kill(self, reason: str = "Killed") -> None:
        """Kill the running process.

        The run then ends with an ``error`` event carrying ``reason``.

        Args:
            reason: Message for the resulting error.
        """
        if self._kill_reason is None:
            self._kill_reason = reason
        if self.is_running:
            assert self._process is not None
            try:
                self._process.kill()
            except ProcessLookupError:
                pass
            logger.debug("Killed engine process %s: %s", self.pid, reason)

    async def run(self) -> int | None:
        """Run the command to completion, emitting events.

        Engine failures are reported through the ``error`` event, never
        raised.

        Returns:
            Process return code, or None if the process could not be started.
        """
        args = self.build_args()
        logger.debug("Starting engine: %s", " ".join(args))
        try:
            self._process = await asyncio.create_subprocess_exec(  # nosec B603
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raw = f"{self.ffmpeg_path}: {e.strerror or e}"
            self._emit("error", EngineFailureError(classify_error(raw), raw=raw))
            return None

        self._emit("start", " ".join(args))
        if self.niceness:
            apply_niceness(self._process.pid, self.niceness)

        # A kill requested before the process existed
        if self._kill_reason is not None:
            self.kill(self._kill_reason)

        try:
            if self.timeout is not None:
                await asyncio.wait_for(self._consume_stderr(), self.timeout)
            else:
                await self._consume_stderr()
        except asyncio.TimeoutError:
            logger.warning(
                "Engine process %s timed out after %s seconds", self.pid, self.timeout
            )
            self.kill(f"Timed out after {self.timeout:g} seconds")
            await self._process.wait()
        except asyncio.CancelledError:
            self.kill(CANCELLED)
            await self._process.wait()
            raise

        return_code = self._process.returncode
        self._flush_codec_data()

        if self._kill_reason is not None:
            self._emit(
                "error",
                EngineFailureError(
                    self._kill_reason, raw=self._kill_reason, exit_code=return_code
                ),
            )
        elif return_code != 0:
            raw = last_diagnostic_line(list(self.stderr_tail))
            if raw is None:
                raw = f"ffmpeg exited with code {return_code}"
            logger.debug("Engine exited with code %s: %s", return_code, raw)
            self._emit(
                "error",
                EngineFailureError(classify_error(raw), raw=raw, exit_code=return_code),
            )
        else:
            self._emit("end")
        return return_code

    async def _consume_stderr(self) -> None:
        """Read stderr until EOF, splitting on both CR and LF.

        ffmpeg rewrites its progress line in place using carriage returns.
        """
        assert self._process is not None and self._process.stderr is not None
        buffer = ""
        while True:
            chunk = await self._process.stderr.read(self.READ_CHUNK_SIZE)
            if not chunk:
                break
            buffer += chunk.decode("utf-8", errors="replace")
            *lines, buffer = _LINE_SPLIT.split(buffer)
            for line in lines:
                self._handle_line(line)
        if buffer:
            self._handle_line(buffer)
        await self._process.wait()

    def _handle_line(self, line: str) -> None:
        if not line.strip():
            return
        self.stderr_tail.append(line)

        stripped = line.strip()
        if stripped.startswith("Input #"):
            self._section = "input"
            return
        if stripped.startswith(("Output #", "Stream mapping:")):
            self._section = "output"
            self._flush_codec_data()
            return

        if self._section == "input":
            if "duration" not in self.codec_data:
                duration = parse_duration(stripped)
                if duration is not None:
                    self.codec_data["duration"] = duration
            stream = parse_stream_codec(stripped)
            if stream is not None:
                kind, description = stream
                self.codec_data.setdefault(kind, description)
            return

        progress = parse_stderr_progress(stripped)
        if progress is not None:
            self._flush_codec_data()
            self._emit("progress", progress)

    def _flush_codec_data(self) -> None:
        """Emit collected input stream information once."""
        if self._codec_data_emitted:
            return
        if "video" not in self.codec_data and "audio" not in self.codec_data:
            return
        self._codec_data_emitted = True
        self._emit("codec_data", dict(self.codec_data))

    def _emit(self, event: str, *payload: Any) -> None:
        if event == "progress" and payload:
            progress: EngineProgress = payload[0]
            progress.percent = progress.get_percent(self.codec_data.get("duration"))
        for callback in list(self._handlers.get(event, ())):
            try:
                callback(*payload)
            except Exception as e:
                logger.warning(
                    "Engine %s handler error: %s", event, e, exc_info=True
                )
