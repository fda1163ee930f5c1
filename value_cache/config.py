from functools import lru_cache
import logging
from pydantic_settings import BaseSettings, SettingsConfigDict

from value_cache.validators import InvalidConfigurationError, validate_duration_ms


logger = logging.getLogger(__name__)

SCHEDULER_KINDS = ("threading", "asyncio")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or invalid."""
    pass


class Settings(BaseSettings):
    """Package configuration pulled from VALUE_CACHE_* environment variables or .env file."""

    # TTL used by build_holder when the caller does not pass one
    default_ttl_ms: float = 60000.0

    # Which timer facility backs holders built through build_holder
    scheduler: str = "threading"

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="VALUE_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def validate_required(self) -> list[str]:
        """Validate configuration settings.

        Returns a list of error messages for invalid settings.
        """
        errors: list[str] = []

        try:
            validate_duration_ms(self.default_ttl_ms)
        except InvalidConfigurationError as e:
            errors.append(f"VALUE_CACHE_DEFAULT_TTL_MS is invalid: {e}")

        if self.scheduler.lower() not in SCHEDULER_KINDS:
            errors.append(
                f"VALUE_CACHE_SCHEDULER must be one of {', '.join(SCHEDULER_KINDS)}, "
                f"got '{self.scheduler}'"
            )

        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(f"VALUE_CACHE_LOG_LEVEL is not a known level: '{self.log_level}'")

        return errors


def validate_config_on_startup(settings: Settings) -> None:
    """Validate configuration and raise if any setting is invalid."""
    errors = settings.validate_required()

    if errors:
        logger.error("Configuration validation failed:")
        for error in errors:
            logger.error(f"  - {error}")
        raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

    logging.getLogger("value_cache").setLevel(settings.log_level.upper())
    logger.debug("Configuration validated successfully")


@lru_cache
def get_settings() -> Settings:
    return Settings()
