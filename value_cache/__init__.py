"""Self-expiring single-value holder."""

from value_cache.config import ConfigurationError, Settings, get_settings
from value_cache.dependencies import build_holder, get_scheduler
from value_cache.services.cache import TimedValueHolder
from value_cache.services.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    Scheduler,
    ThreadingScheduler,
    TimerHandle,
)
from value_cache.validators import InvalidConfigurationError

__all__ = [
    "AsyncioScheduler",
    "ConfigurationError",
    "InvalidConfigurationError",
    "ManualScheduler",
    "Scheduler",
    "Settings",
    "ThreadingScheduler",
    "TimedValueHolder",
    "TimerHandle",
    "build_holder",
    "get_scheduler",
    "get_settings",
]
