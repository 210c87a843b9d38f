"""Completion channel for conversion jobs.

``convert_to_file()`` returns a ConversionHandle immediately. The caller
subscribes to the two terminal events, or awaits ``wait()``. Exactly one
terminal event is delivered per job; emits after the first are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

# Event name constants
CONVERSION_DONE = "conversion.done"
CONVERSION_ERROR = "conversion.error"
CONVERSION_PROGRESS = "conversion.progress"

TERMINAL_EVENTS = frozenset([CONVERSION_DONE, CONVERSION_ERROR])

# All valid event names
VALID_EVENTS = frozenset([CONVERSION_DONE, CONVERSION_ERROR, CONVERSION_PROGRESS])


class ConversionHandle:
    """Event channel for one conversion job.

    Listeners receive a single payload argument: the output ``file://`` URL
    for ``conversion.done``, the exception for ``conversion.error`` and a
    ProgressRecord for ``conversion.progress``.

    Example:
        handle = scheme.convert_to_file("file:///videos/clip.avi")
        handle.once(CONVERSION_DONE, lambda url: print("written", url))
        url = await handle.wait()
    """

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        self._listeners: dict[str, list[tuple[Callable[[Any], Any], bool]]] = (
            defaultdict(list)
        )
        self._outcome: tuple[str, Any] | None = None
        self._waiters: list[asyncio.Future[Any]] = []
        self.task: asyncio.Task[None] | None = None

    @property
    def done(self) -> bool:
        """True once a terminal event has been emitted."""
        return self._outcome is not None

    def on(self, event: str, listener: Callable[[Any], Any]) -> ConversionHandle:
        """Subscribe to an event for every emit."""
        return self._add(event, listener, once=False)

    def once(self, event: str, listener: Callable[[Any], Any]) -> ConversionHandle:
        """Subscribe to the next emit of an event only."""
        return self._add(event, listener, once=True)

    def off(self, event: str, listener: Callable[[Any], Any]) -> ConversionHandle:
        """Remove a listener. Unknown listeners are ignored."""
        self._listeners[event] = [
            (cb, once) for cb, once in self._listeners[event] if cb is not listener
        ]
        return self

    def _add(
        self, event: str, listener: Callable[[Any], Any], once: bool
    ) -> ConversionHandle:
        if event not in VALID_EVENTS:
            raise ValueError(f"Unknown conversion event: {event}")
        self._listeners[event].append((listener, once))
        return self

    def emit(self, event: str, payload: Any = None) -> bool:
        """Deliver an event to its listeners.

        Args:
            event: Event name.
            payload: Event payload.

        Returns:
            True if the event was delivered, False if it was dropped
            because the job already finished.
        """
        if event not in VALID_EVENTS:
            raise ValueError(f"Unknown conversion event: {event}")
        if self._outcome is not None:
            logger.debug("Job %s: dropping %s after completion", self.job_id, event)
            return False
        if event in TERMINAL_EVENTS:
            self._outcome = (event, payload)
            self._resolve_waiters()

        listeners = self._listeners[event]
        self._listeners[event] = [(cb, once) for cb, once in listeners if not once]
        for listener, _ in listeners:
            try:
                listener(payload)
            except Exception as e:
                logger.warning(
                    "Job %s: %s listener error: %s", self.job_id, event, e,
                    exc_info=True,
                )
        return True

    async def wait(self) -> str:
        """Wait for the conversion to finish.

        Returns:
            Output ``file://`` URL.

        Raises:
            Exception: The error delivered with ``conversion.error``.
        """
        if self._outcome is None:
            future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
            self._waiters.append(future)
            await future
        assert self._outcome is not None
        event, payload = self._outcome
        if event == CONVERSION_ERROR:
            raise payload
        return payload

    def _resolve_waiters(self) -> None:
        for future in self._waiters:
            if not future.done():
                future.set_result(None)
        self._waiters.clear()
