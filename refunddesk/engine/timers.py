"""Cancellable one-shot timers.

The engine only needs ``call_later(delay_seconds, callback)`` returning a
handle with ``cancel()``. ``asyncio`` loops already have that shape; the
manual clock below offers the same interface for shells without an event
loop and for deterministic replay.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Protocol, Tuple


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerBackend(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def time(self) -> float: ...


class AsyncioTimers:
    """Timer backend running callbacks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)

    def time(self) -> float:
        return self.loop.time()


class ManualTimerHandle:
    def __init__(self, deadline: float, callback: Callable[[], None]):
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers:
    """
    Virtual clock that fires due callbacks when advanced.

    Callbacks run in deadline order (ties in scheduling order) and may
    schedule further timers; those fire within the same advance when due.
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self._queue: List[Tuple[float, int, ManualTimerHandle]] = []
        self._sequence = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimerHandle:
        handle = ManualTimerHandle(self.now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (handle.deadline, next(self._sequence), handle))
        return handle

    def time(self) -> float:
        return self.now

    def advance(self, seconds: float) -> int:
        return self.advance_to(self.now + seconds)

    def advance_to(self, target: float) -> int:
        """
        Move the clock forward, firing every callback due by ``target``.

        Args:
            target: Absolute clock reading to move to

        Returns:
            Number of callbacks fired
        """
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            deadline, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = max(self.now, deadline)
            handle.callback()
            fired += 1
        self.now = max(self.now, target)
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)
