from __future__ import annotations

import functools
import logging
import threading
import weakref
from typing import Any, Generic, Optional, TypeVar

from value_cache.services.scheduler import Scheduler, ThreadingScheduler, TimerHandle
from value_cache.validators import validate_duration_ms


logger = logging.getLogger(__name__)

T = TypeVar("T")


class _PendingExpiry:
    """Owns the single outstanding expiry timer of a holder."""

    def __init__(self):
        self.handle: Optional[TimerHandle] = None

    def cancel(self) -> None:
        if self.handle is not None:
            self.handle.cancel()
            self.handle = None


def _expire(holder_ref: "weakref.ReferenceType[TimedValueHolder[Any]]", generation: int) -> None:
    holder = holder_ref()
    if holder is not None:
        holder._expire(generation)


class TimedValueHolder(Generic[T]):
    """A single value that is reset to None once its TTL elapses.

    Writing a new value restarts the countdown; clear() empties the holder
    straight away. None is the empty marker and is never stored: assigning
    None is the same as calling clear().

    Do not read ``value`` several times in the same logic and expect the same
    answer, the holder may expire between two reads.
    """

    def __init__(
        self,
        ttl_ms: float,
        starting_value: Optional[T] = None,
        *,
        scheduler: Optional[Scheduler] = None,
        name: Optional[str] = None,
    ):
        self._ttl_ms = validate_duration_ms(ttl_ms)
        self._scheduler: Scheduler = scheduler or ThreadingScheduler()
        self._name = name or "holder"

        self._value: Optional[T] = None
        self._generation = 0
        self._expires_at_ms: Optional[float] = None
        self._pending = _PendingExpiry()
        self._lock = threading.Lock()

        # Timers only hold a weak reference, so a dropped holder is collected
        # and its outstanding timer cancelled here.
        self._finalizer = weakref.finalize(self, self._pending.cancel)

        if starting_value is not None:
            self.value = starting_value

    @property
    def ttl_ms(self) -> float:
        return self._ttl_ms

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> Optional[T]:
        """The stored value, or None when never set, cleared or expired."""
        return self._value

    @value.setter
    def value(self, v: Optional[T]) -> None:
        """Overwrite the value and restart the countdown to its expiry."""
        if v is None:
            self.clear()
            return

        with self._lock:
            # Arm first: a failing scheduler must leave the old value and timer in place
            generation = self._generation + 1
            callback = functools.partial(_expire, weakref.ref(self), generation)
            handle = self._scheduler.call_later(self._ttl_ms, callback)

            self._pending.cancel()
            self._pending.handle = handle
            self._generation = generation
            self._expires_at_ms = self._scheduler.now_ms() + self._ttl_ms
            self._value = v

        logger.debug("Value written to '%s', expires in %.1fms", self._name, self._ttl_ms)

    @property
    def has_value(self) -> bool:
        return self._value is not None

    def clear(self) -> None:
        """Empty the holder immediately and deregister the pending expiry."""
        with self._lock:
            had_value = self._value is not None
            self._pending.cancel()
            self._generation += 1
            self._value = None
            self._expires_at_ms = None

        if had_value:
            logger.debug("Holder '%s' cleared", self._name)

    def _expire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                # Superseded by a write or clear after this timer was armed
                logger.debug("Ignoring stale expiry for '%s'", self._name)
                return
            self._pending.handle = None
            self._value = None
            self._expires_at_ms = None

        logger.debug("Holder '%s' expired after %.1fms", self._name, self._ttl_ms)

    def get_status(self) -> dict[str, Any]:
        """Get holder status for monitoring. Never includes the value itself."""
        with self._lock:
            expires_in_ms = None
            if self._expires_at_ms is not None:
                expires_in_ms = max(0.0, self._expires_at_ms - self._scheduler.now_ms())
            return {
                "name": self._name,
                "ttl_ms": self._ttl_ms,
                "has_value": self._value is not None,
                "generation": self._generation,
                "expires_in_ms": expires_in_ms,
            }

    def __repr__(self) -> str:
        state = "holding" if self.has_value else "empty"
        return f"<TimedValueHolder {self._name!r} ttl={self._ttl_ms}ms {state}>"
