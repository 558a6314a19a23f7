"""Document registration service.

Wires the rate limited queue, the HTTP submitter and the dead-letter log
together behind a single ``create_document`` call. Callers may invoke it
from any number of threads; documents reach the API in submission order at
no more than the configured rate.

Submission and delivery are decoupled in time: ``create_document`` returns
before the document is sent, so delivery failures never surface to the
caller. They are logged and kept in ``failed_submissions()`` instead.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx

from crpt_api.adapters.rate_limit import AbstractRateLimitedQueue, RateLimitedQueue, RateLimiterConfig
from crpt_api.adapters.rate_limit.queue import TimerFactory
from crpt_api.adapters.transport import AbstractSubmitter, HttpDocumentSubmitter
from crpt_api.adapters.transport.base import document_id
from crpt_api.core.config import CrptSettings, settings
from crpt_api.schemas.document import Document
from crpt_api.utils.dead_letter import FailedSubmission, FailedSubmissionLog

logger = logging.getLogger(__name__)


class RegistrationService:
    """Rate limited client for the document creation endpoint."""

    def __init__(
        self,
        *,
        queue: AbstractRateLimitedQueue[Any],
        submitter: AbstractSubmitter,
        dead_letters: FailedSubmissionLog,
    ) -> None:
        self._queue = queue
        self._submitter = submitter
        self._dead_letters = dead_letters

    def __enter__(self) -> RegistrationService:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def create_document(self, document: Document | dict[str, Any]) -> None:
        """Queue a document for rate limited submission.

        Returns immediately; the document is posted during a later drain
        cycle.
        """
        self._queue.submit(document)
        logger.info(
            "registration.queued",
            extra={"doc_id": document_id(document)},
        )

    def failed_submissions(self) -> list[FailedSubmission]:
        return self._dead_letters.entries()

    def pending(self) -> int:
        return self._queue.pending()

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until every queued document has been handed to the submitter.

        Returns:
            False if the timeout elapsed first.
        """
        return self._queue.join(timeout)

    def stats(self) -> dict[str, Any]:
        return {"queue": self._queue.stats(), "dead_letters": self._dead_letters.stats()}

    def close(self) -> list[Any]:
        """Stop the queue, release the HTTP client and return undelivered documents."""

        undelivered = self._queue.close()
        self._submitter.close()
        logger.info("registration.closed", extra={"undelivered": len(undelivered)})
        return undelivered


def build_registration_service(
    crpt_settings: CrptSettings | None = None,
    *,
    period_unit: str | None = None,
    limit: int | None = None,
    client: httpx.Client | None = None,
    timer_factory: TimerFactory | None = None,
) -> RegistrationService:
    """Factory building a service from settings.

    Explicit ``period_unit`` and ``limit`` override the configured values.
    The limiter configuration is validated before any HTTP client is created.

    Raises:
        ConfigurationAppError: If the limit, period unit or dead-letter size
            is invalid.
    """
    cfg = crpt_settings or settings.crpt

    config = RateLimiterConfig.per(
        period_unit or cfg.rate_limit_period_unit,
        cfg.rate_limit_requests if limit is None else limit,
    )
    dead_letters = FailedSubmissionLog(max_entries=cfg.dead_letter_max_entries)
    submitter = HttpDocumentSubmitter(
        cfg.create_url,
        timeout_seconds=cfg.timeout_seconds,
        client=client,
        dead_letters=dead_letters,
    )
    queue: RateLimitedQueue[Any] = RateLimitedQueue(
        config, submitter.send, timer_factory=timer_factory
    )

    logger.info(
        "registration.configured",
        extra={
            "url": cfg.create_url,
            "limit": config.limit,
            "period_s": config.period_seconds,
        },
    )
    return RegistrationService(queue=queue, submitter=submitter, dead_letters=dead_letters)
