"""Input validation for value-cache.

Durations are plain numbers of milliseconds. Anything that is not a real,
finite, positive number is rejected before a holder or timer is created.
"""

from __future__ import annotations

import math
from numbers import Real


class InvalidConfigurationError(ValueError):
    """Raised when a holder or timer is given an unusable duration."""
    pass


def validate_duration_ms(duration: object, allow_zero: bool = False) -> float:
    """Validate a duration expressed in milliseconds.

    Durations must be:
    - An int or float (bool is rejected even though it is an int)
    - Not NaN and not infinite
    - Strictly greater than zero (or zero when allow_zero is set)

    Returns the duration as a float.
    Raises InvalidConfigurationError if invalid.
    """
    if isinstance(duration, bool) or not isinstance(duration, Real):
        raise InvalidConfigurationError(
            f"The duration (in ms) must be a number, got {type(duration).__name__}: {duration!r}"
        )

    try:
        duration = float(duration)
    except OverflowError:
        raise InvalidConfigurationError(
            f"The duration (in ms) is too large to represent: {duration!r}"
        ) from None

    if math.isnan(duration):
        raise InvalidConfigurationError("The duration (in ms) cannot be NaN")

    if math.isinf(duration):
        raise InvalidConfigurationError(f"The duration (in ms) must be finite, got {duration}")

    if duration < 0 or (duration == 0 and not allow_zero):
        raise InvalidConfigurationError(
            f"The duration (in ms) must be a positive number greater than 0, got {duration}"
        )

    return duration
