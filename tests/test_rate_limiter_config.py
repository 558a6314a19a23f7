"""Unit tests for rate limiter configuration."""

from datetime import timedelta

import pytest

from crpt_api.adapters.rate_limit import RateLimiterConfig
from crpt_api.core.errors import AppError, ConfigurationAppError


@pytest.mark.parametrize(
    ("unit", "expected"),
    [
        ("milliseconds", timedelta(milliseconds=1)),
        ("seconds", timedelta(seconds=1)),
        ("SECONDS", timedelta(seconds=1)),
        ("second", timedelta(seconds=1)),
        ("min", timedelta(minutes=1)),
        ("hours", timedelta(hours=1)),
        ("days", timedelta(days=1)),
    ],
)
def test_per_unit_builds_one_unit_period(unit: str, expected: timedelta) -> None:
    config = RateLimiterConfig.per(unit, 10)

    assert config.period == expected
    assert config.limit == 10


@pytest.mark.parametrize("limit", [0, -1, -100])
def test_limit_below_one_is_rejected(limit: int) -> None:
    with pytest.raises(ConfigurationAppError) as exc_info:
        RateLimiterConfig.per("seconds", limit)

    assert exc_info.value.code == "invalid_rate_limit"
    assert str(limit) in str(exc_info.value)


def test_boolean_limit_is_rejected() -> None:
    with pytest.raises(ConfigurationAppError):
        RateLimiterConfig(period=timedelta(seconds=1), limit=True)


@pytest.mark.parametrize("period", [timedelta(0), timedelta(seconds=-1)])
def test_non_positive_period_is_rejected(period: timedelta) -> None:
    with pytest.raises(ConfigurationAppError) as exc_info:
        RateLimiterConfig(period=period, limit=1)

    assert exc_info.value.code == "invalid_rate_period"


def test_unknown_unit_is_rejected() -> None:
    with pytest.raises(ConfigurationAppError) as exc_info:
        RateLimiterConfig.per("fortnights", 1)

    assert exc_info.value.code == "invalid_rate_period_unit"
    assert "fortnights" in exc_info.value.message


def test_config_is_immutable() -> None:
    config = RateLimiterConfig.per("seconds", 1)

    with pytest.raises(AttributeError):
        config.limit = 5  # type: ignore[misc]


def test_configuration_error_is_an_app_error() -> None:
    assert issubclass(ConfigurationAppError, AppError)
    assert RateLimiterConfig.per("ms", 1).period_seconds == pytest.approx(0.001)
