"""In-memory record of documents whose submission failed.

Failed items are not retried. This log keeps them (bounded, oldest evicted
first) so the caller can inspect or resubmit them.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Any

from crpt_api.adapters.transport.base import SubmissionOutcome
from crpt_api.core.errors import ConfigurationAppError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FailedSubmission:
    """A document that could not be delivered, with the reason."""

    item: Any
    outcome: SubmissionOutcome
    failed_at: float


class FailedSubmissionLog:
    """Thread-safe, bounded dead-letter log.

    Attributes:
        max_entries: Maximum number of kept failures (None for unlimited).
    """

    def __init__(self, max_entries: int | None = 1000) -> None:
        if max_entries is not None and max_entries < 0:
            raise ConfigurationAppError(
                code="invalid_dead_letter_size",
                message=f"Dead-letter capacity must be >= 0, got {max_entries!r}",
                details={"actual_value": max_entries},
            )
        self._max_entries = max_entries
        self._entries: deque[FailedSubmission] = deque()
        self._lock = threading.RLock()
        self._recorded = 0
        self._evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"FailedSubmissionLog(max_entries={self._max_entries}, "
            f"size={len(self._entries)}, recorded={self._recorded}, "
            f"evictions={self._evictions})"
        )

    def record(self, item: Any, outcome: SubmissionOutcome) -> None:
        """Store a failed item, evicting the oldest entry when full."""

        with self._lock:
            self._entries.append(
                FailedSubmission(item=item, outcome=outcome, failed_at=time.time())
            )
            self._recorded += 1
            self._evict_if_over_capacity_locked()
            size = len(self._entries)

        logger.debug(
            "dead_letter.recorded",
            extra={"doc_id": outcome.doc_id, "size": size},
        )

    def entries(self) -> list[FailedSubmission]:
        """Return a snapshot of the kept failures, oldest first."""

        with self._lock:
            return list(self._entries)

    def drain(self) -> list[FailedSubmission]:
        """Remove and return all kept failures, oldest first."""

        with self._lock:
            drained = list(self._entries)
            self._entries.clear()
            return drained

    def clear(self) -> None:
        """Remove all entries and reset counters."""

        with self._lock:
            self._entries.clear()
            self._recorded = 0
            self._evictions = 0

    def stats(self) -> dict[str, int | None]:
        """Return lightweight metrics without exposing documents."""

        with self._lock:
            return {
                "max_entries": self._max_entries,
                "entries": len(self._entries),
                "recorded": self._recorded,
                "evictions": self._evictions,
            }

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_entries is None:
            return

        while len(self._entries) > self._max_entries:
            self._entries.popleft()
            self._evictions += 1
