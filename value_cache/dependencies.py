from functools import lru_cache
import logging
from typing import Optional, TypeVar

from value_cache.config import get_settings, validate_config_on_startup
from value_cache.services.cache import TimedValueHolder
from value_cache.services.scheduler import AsyncioScheduler, Scheduler, ThreadingScheduler


logger = logging.getLogger(__name__)

T = TypeVar("T")


@lru_cache
def get_scheduler() -> Scheduler:
    """Process-wide scheduler picked by VALUE_CACHE_SCHEDULER."""
    settings = get_settings()
    validate_config_on_startup(settings)

    if settings.scheduler.lower() == "asyncio":
        scheduler: Scheduler = AsyncioScheduler()
    else:
        scheduler = ThreadingScheduler()
    logger.info("Using %s for holder expiry", type(scheduler).__name__)
    return scheduler


def build_holder(
    ttl_ms: Optional[float] = None,
    starting_value: Optional[T] = None,
    *,
    name: Optional[str] = None,
    scheduler: Optional[Scheduler] = None,
) -> TimedValueHolder[T]:
    """Create a holder wired to the configured scheduler and default TTL."""
    if ttl_ms is None:
        settings = get_settings()
        validate_config_on_startup(settings)
        ttl_ms = settings.default_ttl_ms

    return TimedValueHolder(
        ttl_ms,
        starting_value,
        scheduler=scheduler or get_scheduler(),
        name=name,
    )
