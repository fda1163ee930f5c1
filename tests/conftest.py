"""Shared test fixtures: virtual clock and clean configuration caches."""

import pytest

from value_cache.config import get_settings
from value_cache.dependencies import get_scheduler
from value_cache.services.scheduler import ManualScheduler


@pytest.fixture(autouse=True)
def reset_cached_settings(monkeypatch):
    """Every test starts from default settings and a fresh scheduler."""
    for var in ("VALUE_CACHE_DEFAULT_TTL_MS", "VALUE_CACHE_SCHEDULER", "VALUE_CACHE_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    get_scheduler.cache_clear()
    yield
    get_settings.cache_clear()
    get_scheduler.cache_clear()


@pytest.fixture
def clock():
    """A virtual clock starting at t=0ms."""
    return ManualScheduler()


class RecordingScheduler:
    """Hands out timers that never fire on their own, keeping their callbacks."""

    class Handle:
        def __init__(self):
            self.cancel_calls = 0

        def cancel(self):
            self.cancel_calls += 1

    def __init__(self):
        self.calls = []

    def call_later(self, delay_ms, callback):
        handle = self.Handle()
        self.calls.append((delay_ms, callback, handle))
        return handle

    def now_ms(self):
        return 0.0


@pytest.fixture
def recorder():
    return RecordingScheduler()
