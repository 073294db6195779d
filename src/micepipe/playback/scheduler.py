"""Timers that drive playback ticks.

``ManualScheduler`` runs on virtual time, for tests and headless runs;
``AsyncioScheduler`` hands callbacks to a running asyncio event loop. Both
return handles whose ``cancel()`` guarantees the callback will not run.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Protocol, Tuple


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class ManualHandle:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, ManualHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now + max(float(delay), 0.0), callback)
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def _pop_due(self, limit: Optional[float]) -> Optional[ManualHandle]:
        while self._queue:
            due, _, handle = self._queue[0]
            if limit is not None and due > limit:
                return None
            heapq.heappop(self._queue)
            if not handle.cancelled:
                return handle
        return None

    def advance(self, seconds: float) -> int:
        """Move virtual time forward, firing every callback that falls due."""
        target = self.now + float(seconds)
        fired = 0
        while True:
            handle = self._pop_due(target)
            if handle is None:
                break
            self.now = handle.due
            handle.callback()
            fired += 1
        self.now = target
        return fired

    def run_until_idle(self, max_callbacks: int = 1_000_000) -> int:
        """Fire callbacks in due order until none remain."""
        fired = 0
        while fired < max_callbacks:
            handle = self._pop_due(None)
            if handle is None:
                break
            self.now = handle.due
            handle.callback()
            fired += 1
        return fired


class AsyncioScheduler:
    """Schedule on an asyncio loop; create it from inside a running coroutine."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._loop.call_later(delay, callback)
