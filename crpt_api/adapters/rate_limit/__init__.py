"""Rate limiting adapters.

The registration service depends on the abstract queue interface so the
in-process, timer-driven implementation can later be replaced (for example
by a shared broker) without touching callers.
"""

from crpt_api.adapters.rate_limit.base import AbstractRateLimitedQueue, RateLimiterConfig
from crpt_api.adapters.rate_limit.queue import RateLimitedQueue

__all__ = [
    "AbstractRateLimitedQueue",
    "RateLimitedQueue",
    "RateLimiterConfig",
]
