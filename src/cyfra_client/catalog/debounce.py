from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable


logger = logging.getLogger("cyfra.search")

EmitCallable = Callable[[str], Awaitable[None]]


class Debouncer:
    """Collapse rapid pushes into one emission after ``delay`` seconds of quiet.

    Each push cancels the pending emission and schedules a new one. Once the
    quiet period elapses the emission is detached from the timer, so a later
    push never cancels a callback that is already running.
    """

    def __init__(self, callback: EmitCallable, *, delay: float = 0.3):
        self._callback = callback
        self._delay = max(0.0, float(delay))
        self._pending: asyncio.Task[None] | None = None
        self._running: set[asyncio.Task[None]] = set()
        self.emissions = 0

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def push(self, value: str) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._pending = loop.create_task(self._wait_then_emit(value), name="cyfra-debounce")

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def aclose(self) -> None:
        """Drop the pending timer and stop any emission still running."""
        self.cancel()
        running = list(self._running)
        for task in running:
            task.cancel()
        if running:
            await asyncio.gather(*running, return_exceptions=True)

    async def flush(self) -> None:
        """Wait for the pending timer and any emission it started."""
        if self._pending is not None:
            try:
                await self._pending
            except asyncio.CancelledError:
                pass
        if self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)

    async def _wait_then_emit(self, value: str) -> None:
        await asyncio.sleep(self._delay)
        current = asyncio.current_task()
        if self._pending is current:
            self._pending = None
        task = asyncio.get_running_loop().create_task(self._emit(value), name="cyfra-debounce-emit")
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _emit(self, value: str) -> None:
        self.emissions += 1
        logger.debug("search_emitted query=%r", value)
        await self._callback(value)
