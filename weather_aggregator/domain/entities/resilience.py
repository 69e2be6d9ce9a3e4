"""Value objects configuring retries, circuit breakers and retention."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import MisconfiguredError


class BreakerState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """
    Bounded retry with exponential backoff.

    The delay before retry ``k`` (0-indexed) is ``initial_delay * 2**k``,
    capped at ``max_delay`` when ``max_delay`` is positive.
    """

    max_retries: int = 3
    initial_delay: float = 0.5
    max_delay: float = 5.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise MisconfiguredError(
                "max_retries must be non-negative",
                details={"max_retries": self.max_retries},
            )
        if self.initial_delay <= 0:
            raise MisconfiguredError(
                "initial_delay must be positive",
                details={"initial_delay": self.initial_delay},
            )
        if self.max_delay < 0:
            raise MisconfiguredError(
                "max_delay must be non-negative",
                details={"max_delay": self.max_delay},
            )

    def delay_for(self, attempt: int) -> float:
        delay = self.initial_delay * (2**attempt)
        if self.max_delay > 0:
            return min(delay, self.max_delay)
        return delay


@dataclass(frozen=True, slots=True)
class BreakerSettings:
    """Thresholds for a per-source circuit breaker. Durations in seconds."""

    failure_threshold: int = 5
    window: float = 60.0
    cooldown: float = 120.0
    half_open_max_calls: int = 5

    def __post_init__(self) -> None:
        if self.failure_threshold < 1:
            raise MisconfiguredError("failure_threshold must be at least 1")
        if self.half_open_max_calls < 1:
            raise MisconfiguredError("half_open_max_calls must be at least 1")
        if self.cooldown <= 0:
            raise MisconfiguredError("cooldown must be positive")
        if self.window < 0:
            raise MisconfiguredError("window must be non-negative")


@dataclass(frozen=True, slots=True)
class RetentionPolicy:
    """History bounds. Zero disables the corresponding bound."""

    max_entries: int = 96
    max_age_seconds: float = 86400.0

    def __post_init__(self) -> None:
        if self.max_entries < 0 or self.max_age_seconds < 0:
            raise MisconfiguredError(
                "Retention bounds must be non-negative",
                details={
                    "max_entries": self.max_entries,
                    "max_age_seconds": self.max_age_seconds,
                },
            )
