from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import threading
import time
from typing import Callable, Protocol

from value_cache.validators import validate_duration_ms


logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled before it fires."""

    def cancel(self) -> None:
        """Cancel the callback. Safe to call more than once, or after it fired."""


class Scheduler(Protocol):
    """Deferred-callback facility used by holders to arrange their expiry."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once, delay_ms milliseconds from now."""

    def now_ms(self) -> float:
        """Monotonic clock reading in milliseconds."""


class ThreadingScheduler:
    """Schedules callbacks on daemon threading.Timer threads."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        delay_ms = validate_duration_ms(delay_ms, allow_zero=True)
        # Event.wait rejects timeouts above TIMEOUT_MAX
        timer = threading.Timer(min(delay_ms / 1000.0, threading.TIMEOUT_MAX), callback)
        timer.daemon = True
        timer.start()
        return timer

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop.

    When no loop is given, the loop running at the time of each call is used,
    so call_later must then be invoked from inside a coroutine or callback.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        delay_ms = validate_duration_ms(delay_ms, allow_zero=True)
        return self._get_loop().call_later(delay_ms / 1000.0, callback)

    def now_ms(self) -> float:
        if self._loop is not None:
            return self._loop.time() * 1000.0
        try:
            return asyncio.get_running_loop().time() * 1000.0
        except RuntimeError:
            # No running loop; loop.time() defaults to time.monotonic()
            return time.monotonic() * 1000.0


class _ManualTimer:
    def __init__(self, due_ms: float, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock: callbacks only fire when advance() moves time past them.

    Used to drive holders deterministically in tests and simulations.
    """

    def __init__(self, start_ms: float = 0.0):
        self._now_ms = float(start_ms)
        self._queue: list[tuple[float, int, _ManualTimer]] = []
        self._counter = itertools.count()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        delay_ms = validate_duration_ms(delay_ms, allow_zero=True)
        timer = _ManualTimer(self._now_ms + delay_ms, callback)
        heapq.heappush(self._queue, (timer.due_ms, next(self._counter), timer))
        return timer

    def now_ms(self) -> float:
        return self._now_ms

    @property
    def pending(self) -> int:
        """Number of timers that are neither cancelled nor fired."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled and not timer.fired)

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward, firing every timer that falls due.

        Timers fire in due-time order, ties in scheduling order. Returns the
        number of callbacks run.
        """
        target = self._now_ms + validate_duration_ms(delta_ms, allow_zero=True)
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            due_ms, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now_ms = due_ms
            timer.fired = True
            timer.callback()
            fired += 1

        self._now_ms = target
        if fired:
            logger.debug("Manual clock advanced to %.3fms, %d callback(s) fired", target, fired)
        return fired
