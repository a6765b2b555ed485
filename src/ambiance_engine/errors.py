from __future__ import annotations

import math


class AmbianceError(Exception):
    """Base class for generation errors."""


class ConfigurationError(AmbianceError, ValueError):
    """Configuration cannot be generated (bad window, malformed values)."""


class UnsupportedIntervalMode(ConfigurationError):
    """Interval mode has no placement algorithm yet (noise, euclidean)."""


class HostMutationFailure(AmbianceError):
    """A timeline host call failed while applying a placement."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


def validate_window(start: float, end: float) -> float:
    """Return the window length, raising ConfigurationError when unusable."""
    try:
        start = float(start)
        end = float(end)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"window bounds must be numbers: {e}") from e
    if not (math.isfinite(start) and math.isfinite(end)):
        raise ConfigurationError("window bounds must be finite")
    if end <= start:
        raise ConfigurationError(f"empty time window [{start}, {end})")
    return end - start
