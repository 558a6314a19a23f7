"""Rate limiter interfaces and configuration.

Callers should depend on this abstraction (not the concrete implementation)
so the queue backend can be swapped with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, TypeVar

from crpt_api.core.errors import ConfigurationAppError

T = TypeVar("T")

_UNIT_SECONDS: dict[str, float] = {
    "milliseconds": 0.001,
    "seconds": 1.0,
    "minutes": 60.0,
    "hours": 3600.0,
    "days": 86400.0,
}

_UNIT_ALIASES: dict[str, str] = {
    "ms": "milliseconds",
    "millisecond": "milliseconds",
    "s": "seconds",
    "sec": "seconds",
    "second": "seconds",
    "m": "minutes",
    "min": "minutes",
    "minute": "minutes",
    "h": "hours",
    "hour": "hours",
    "d": "days",
    "day": "days",
}


@dataclass(frozen=True)
class RateLimiterConfig:
    """How many items may be released per period.

    Attributes:
        period: Length of one drain period.
        limit: Maximum items released per period (>= 1).

    Raises:
        ConfigurationAppError: If limit < 1 or period is not positive.
    """

    period: timedelta
    limit: int

    def __post_init__(self) -> None:
        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1:
            raise ConfigurationAppError(
                code="invalid_rate_limit",
                message=f"Request limit must be >= 1, got {self.limit!r}",
                details={"actual_value": self.limit},
            )
        if not isinstance(self.period, timedelta) or self.period <= timedelta(0):
            raise ConfigurationAppError(
                code="invalid_rate_period",
                message=f"Rate limit period must be a positive timedelta, got {self.period!r}",
                details={"actual_value": str(self.period)},
            )

    @classmethod
    def per(cls, unit: str, limit: int) -> RateLimiterConfig:
        """Build a config releasing ``limit`` items per one ``unit`` of time.

        Args:
            unit: Time unit name, e.g. "seconds" or "minutes" (singular and
                short forms such as "s" or "min" are accepted).
            limit: Maximum items per period.

        Raises:
            ConfigurationAppError: On an unknown unit or an invalid limit.
        """
        key = unit.strip().lower()
        key = _UNIT_ALIASES.get(key, key)
        if key not in _UNIT_SECONDS:
            raise ConfigurationAppError(
                code="invalid_rate_period_unit",
                message=(
                    f"Unknown period unit: '{unit}'. "
                    f"Supported units: {', '.join(_UNIT_SECONDS)}"
                ),
                details={"actual_value": unit},
            )
        return cls(period=timedelta(seconds=_UNIT_SECONDS[key]), limit=limit)

    @property
    def period_seconds(self) -> float:
        return self.period.total_seconds()


class AbstractRateLimitedQueue(ABC, Generic[T]):
    """Interface for queues releasing items at a bounded rate."""

    @abstractmethod
    def submit(self, item: T) -> None:
        """Accept an item for delayed, rate-limited release.

        Never rejects and never waits for delivery.
        """
        raise NotImplementedError

    @abstractmethod
    def pending(self) -> int:
        """Return the number of items not yet handed off."""
        raise NotImplementedError

    @abstractmethod
    def join(self, timeout: float | None = None) -> bool:
        """Wait until everything submitted so far has been handed off.

        Returns:
            False if the timeout elapsed first.
        """
        raise NotImplementedError

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        """Return counters describing queue activity."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> list[T]:
        """Stop releasing and return the undelivered items in FIFO order."""
        raise NotImplementedError
