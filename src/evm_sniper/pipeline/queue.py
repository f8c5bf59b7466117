"""In-memory FIFO buffer between the log stream and the decode step."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable

from evm_sniper.models.events import RawLogEvent

log = logging.getLogger(__name__)

LogHandler = Callable[[RawLogEvent], Awaitable[None]]


class EventQueue:
    """Ordered buffer of raw logs with a single drain loop.

    ``enqueue`` appends and starts a drain task when none is active. The
    drain loop pops items in arrival order, hands each to ``handler`` and
    sleeps ``pacing_delay`` between items. A failing item is logged and
    dropped, never re-queued. Only one drain loop runs at a time; leftovers
    found after a loop exits are picked up by a fresh drain scheduled
    ``redrain_delay`` seconds later.

    ``max_depth`` bounds memory: when full, the oldest buffered item is
    dropped to make room. None (the default) leaves the queue unbounded.
    """

    def __init__(
        self,
        handler: LogHandler,
        pacing_delay: float = 0.1,
        redrain_delay: float = 1.0,
        max_depth: int | None = None,
        should_run: Callable[[], bool] | None = None,
    ) -> None:
        self._handler = handler
        self._pacing_delay = pacing_delay
        self._redrain_delay = redrain_delay
        self._max_depth = max_depth
        self._should_run = should_run or (lambda: True)
        self._items: deque[RawLogEvent] = deque()
        self._draining = False
        self._drain_task: asyncio.Task | None = None
        self._redrain_handle: asyncio.TimerHandle | None = None

        self.processed_total = 0
        self.failed_total = 0
        self.dropped_total = 0

    @property
    def depth(self) -> int:
        return len(self._items)

    @property
    def is_draining(self) -> bool:
        return self._draining

    def enqueue(self, item: RawLogEvent) -> None:
        """Append to the tail and make sure a drain loop is running."""
        if self._max_depth is not None and len(self._items) >= self._max_depth:
            self._items.popleft()
            self.dropped_total += 1
            if self.dropped_total % 1000 == 1:
                log.warning(
                    "Event queue full (%d), dropping oldest (%d dropped so far)",
                    self._max_depth, self.dropped_total,
                )
        self._items.append(item)

        if not self._draining:
            self._schedule_drain()

    def clear(self) -> int:
        """Discard everything buffered. Returns how many items were dropped."""
        count = len(self._items)
        self._items.clear()
        if self._redrain_handle is not None:
            self._redrain_handle.cancel()
            self._redrain_handle = None
        log.info("Cleared event queue with %d pending events", count)
        return count

    async def drain(self) -> None:
        """Process buffered items until empty. Returns at once if already draining."""
        if self._draining or not self._items:
            return

        self._draining = True
        try:
            while self._items and self._should_run():
                item = self._items.popleft()
                try:
                    await self._handler(item)
                    self.processed_total += 1
                except Exception as exc:
                    # Not re-queued: a poison event must not loop forever
                    self.failed_total += 1
                    log.error("Error processing queued event: %s", exc, exc_info=True)

                await asyncio.sleep(self._pacing_delay)
        finally:
            self._draining = False
            if self._items and self._should_run():
                self._schedule_redrain()

    async def close(self) -> None:
        """Cancel any pending re-drain and wait for the active loop to exit."""
        if self._redrain_handle is not None:
            self._redrain_handle.cancel()
            self._redrain_handle = None
        task = self._drain_task
        if task is not None and not task.done():
            await asyncio.gather(task, return_exceptions=True)

    def _schedule_drain(self) -> None:
        if self._drain_task is not None and not self._drain_task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.debug("No running event loop, %d item(s) buffered", len(self._items))
            return
        self._drain_task = loop.create_task(self.drain())

    def _schedule_redrain(self) -> None:
        if self._redrain_handle is not None:
            return
        loop = asyncio.get_running_loop()

        def _fire() -> None:
            self._redrain_handle = None
            self._schedule_drain()

        self._redrain_handle = loop.call_later(self._redrain_delay, _fire)
