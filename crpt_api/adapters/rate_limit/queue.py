"""In-memory rate limited queue driven by a periodic timer.

Notes:
- Per-process only: several processes each get their own full budget.
- Thread-safe: the buffer and the active flag live under one lock.
- The buffer is unbounded. If producers outpace ``limit / period`` for good,
  memory grows without limit; backpressure is queuing delay only.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Any, Callable, Protocol, TypeVar

from crpt_api.adapters.rate_limit.base import AbstractRateLimitedQueue, RateLimiterConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EMPTY: Any = object()


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


# Called as factory(delay_seconds, callback). Must start the timer and return
# without invoking the callback on the calling thread.
TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def start_daemon_timer(delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
    """Run ``callback`` once on a daemon thread after ``delay_seconds``."""

    timer = threading.Timer(delay_seconds, callback)
    timer.daemon = True
    timer.name = "rate-limited-queue-drain"
    timer.start()
    return timer


class RateLimitedQueue(AbstractRateLimitedQueue[T]):
    """FIFO queue releasing at most ``limit`` items per ``period``.

    ``submit`` appends and returns at once. The first submission into an idle
    queue schedules a drain one full period later; each drain hands up to
    ``limit`` items to ``handler`` and, if items remain, schedules the next
    drain one period after it finished. Once a drain leaves the buffer empty
    the queue goes idle and the next ``submit`` starts over. Unused capacity
    is never carried over between periods.

    The handler runs on the timer thread without the lock held, so a slow
    handler delays later releases but never blocks producers. Exceptions
    raised by the handler are logged and the drain carries on with the next
    item.
    """

    def __init__(
        self,
        config: RateLimiterConfig,
        handler: Callable[[T], Any],
        *,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        """Initialize the queue.

        Args:
            config: Period and per-period limit.
            handler: Called once per released item, in submission order.
            timer_factory: Source of one-shot timers (defaults to daemon
                ``threading.Timer`` threads).
        """
        self._config = config
        self._handler = handler
        self._timer_factory = timer_factory or start_daemon_timer
        self._cond = threading.Condition(threading.Lock())
        self._buffer: deque[T] = deque()
        self._active = False
        self._timer: TimerHandle | None = None
        # Bumped for every scheduled drain and on close; drains holding an
        # older value are stale and must not touch the buffer.
        self._generation = 0
        self._submitted = 0
        self._released = 0
        self._handler_errors = 0
        self._cycles = 0

    @property
    def config(self) -> RateLimiterConfig:
        return self._config

    def submit(self, item: T) -> None:
        """Append ``item``; start the periodic drain if the queue is idle.

        If the first timer cannot be started the item is not kept, the queue
        stays idle and the timer factory's error propagates.
        """

        with self._cond:
            self._buffer.append(item)
            self._submitted += 1
            pending = len(self._buffer)
            started = not self._active
            if started:
                try:
                    self._schedule_locked()
                except BaseException:
                    self._buffer.pop()
                    self._submitted -= 1
                    raise
                self._active = True

        logger.debug(
            "queue.submitted",
            extra={"pending": pending, "drain_started": started},
        )

    def pending(self) -> int:
        with self._cond:
            return len(self._buffer)

    def is_active(self) -> bool:
        with self._cond:
            return self._active

    def join(self, timeout: float | None = None) -> bool:
        with self._cond:
            return self._cond.wait_for(
                lambda: not self._active and not self._buffer,
                timeout=timeout,
            )

    def close(self) -> list[T]:
        with self._cond:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            undelivered = list(self._buffer)
            self._buffer.clear()
            self._active = False
            self._cond.notify_all()

        if undelivered:
            logger.warning("queue.closed_with_pending", extra={"undelivered": len(undelivered)})
        else:
            logger.debug("queue.closed")
        return undelivered

    def stats(self) -> dict[str, Any]:
        """Return counters describing queue activity."""

        with self._cond:
            return {
                "limit": self._config.limit,
                "period_s": self._config.period_seconds,
                "pending": len(self._buffer),
                "active": self._active,
                "submitted": self._submitted,
                "released": self._released,
                "handler_errors": self._handler_errors,
                "cycles": self._cycles,
            }

    def _schedule_locked(self) -> None:
        generation = self._generation + 1
        self._timer = self._timer_factory(
            self._config.period_seconds,
            lambda: self._drain(generation),
        )
        self._generation = generation

    def _pop_locked(self, generation: int) -> Any:
        if generation != self._generation or not self._buffer:
            return _EMPTY
        return self._buffer.popleft()

    def _drain(self, generation: int) -> None:
        """Run one drain cycle: release up to ``limit`` items."""

        with self._cond:
            if generation != self._generation:
                logger.debug("queue.stale_drain_skipped", extra={"generation": generation})
                return
            self._timer = None
            self._cycles += 1

        released = 0
        try:
            while released < self._config.limit:
                with self._cond:
                    item = self._pop_locked(generation)
                if item is _EMPTY:
                    break
                released += 1
                self._deliver(item)
        finally:
            self._finish_cycle(generation, released)

    def _finish_cycle(self, generation: int, released: int) -> None:
        """Schedule the next drain, or go idle once the buffer is empty."""

        with self._cond:
            if generation != self._generation:
                return
            remaining = len(self._buffer)
            if remaining:
                try:
                    self._schedule_locked()
                except Exception:
                    # Items stay buffered; the next submit schedules again.
                    logger.exception("queue.reschedule_failed", extra={"pending": remaining})
                    self._timer = None
                    self._active = False
                    self._cond.notify_all()
                    return
            else:
                self._active = False
                self._cond.notify_all()

        logger.debug(
            "queue.drain_completed",
            extra={"released": released, "pending": remaining, "idle": remaining == 0},
        )

    def _deliver(self, item: T) -> None:
        try:
            self._handler(item)
        except Exception:
            logger.exception("queue.handler_failed")
            with self._cond:
                self._handler_errors += 1
        finally:
            with self._cond:
                self._released += 1
