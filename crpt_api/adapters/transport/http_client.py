"""HTTP submitter posting documents to the registration API."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel

from crpt_api.adapters.transport.base import AbstractSubmitter, SubmissionOutcome, document_id
from crpt_api.core.errors import TransportAppError
from crpt_api.core.logging import clear_doc_id, set_doc_id

if TYPE_CHECKING:
    from crpt_api.utils.dead_letter import FailedSubmissionLog

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}
_RESPONSE_PREVIEW_CHARS = 200


def serialize_document(item: Any) -> str:
    """Serialize a document to its JSON wire form.

    Pydantic models are dumped by alias so camelCase wire names survive.

    Raises:
        TransportAppError: If the item cannot be represented as JSON.
    """
    try:
        if isinstance(item, BaseModel):
            return item.model_dump_json(by_alias=True)
        return json.dumps(item, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise TransportAppError(
            code="serialization_failed",
            message=f"Document cannot be serialized to JSON: {exc}",
            details={"doc_id": document_id(item) or ""},
        ) from exc


class HttpDocumentSubmitter(AbstractSubmitter):
    """Posts one document per call and reports the outcome.

    Failures (serialization, network, non-2xx) are logged, recorded in the
    dead-letter log when one is given and returned as ``ok=False``. Nothing
    is retried.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 30.0,
        client: httpx.Client | None = None,
        dead_letters: FailedSubmissionLog | None = None,
    ) -> None:
        """Initialize the submitter.

        Args:
            url: Absolute URL of the document creation endpoint.
            timeout_seconds: Timeout for each request when the client is
                created here.
            client: Optional preconfigured httpx client; it is not closed by
                ``close()`` when supplied by the caller.
            dead_letters: Optional log receiving failed items.
        """
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout_seconds)
        self._dead_letters = dead_letters

    def send(self, item: Any) -> SubmissionOutcome:
        doc_id = document_id(item)
        set_doc_id(doc_id)
        try:
            logger.info("submission.started", extra={"url": self.url})
            try:
                response = self._post(serialize_document(item))
            except TransportAppError as exc:
                outcome = SubmissionOutcome(ok=False, doc_id=doc_id, error=exc.message)
                logger.error(
                    "submission.failed",
                    extra={"error_code": exc.code, "error": exc.message},
                    exc_info=exc,
                )
                self._record_failure(item, outcome)
                return outcome

            body = response.text
            if response.is_success:
                logger.info(
                    "submission.accepted",
                    extra={
                        "status_code": response.status_code,
                        "response_preview": body[:_RESPONSE_PREVIEW_CHARS],
                    },
                )
                return SubmissionOutcome(
                    ok=True,
                    doc_id=doc_id,
                    status_code=response.status_code,
                    body=body,
                )

            outcome = SubmissionOutcome(
                ok=False,
                doc_id=doc_id,
                status_code=response.status_code,
                body=body,
                error=f"HTTP {response.status_code}",
            )
            logger.warning(
                "submission.rejected",
                extra={
                    "status_code": response.status_code,
                    "response_preview": body[:_RESPONSE_PREVIEW_CHARS],
                },
            )
            self._record_failure(item, outcome)
            return outcome
        finally:
            clear_doc_id()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _post(self, body: str) -> httpx.Response:
        try:
            return self._client.post(self.url, content=body, headers=_JSON_HEADERS)
        except httpx.TimeoutException as exc:
            raise TransportAppError(
                code="transport_timeout",
                message=f"Request to {self.url} timed out",
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportAppError(
                code="transport_error",
                message=f"Request to {self.url} failed: {exc}",
            ) from exc

    def _record_failure(self, item: Any, outcome: SubmissionOutcome) -> None:
        if self._dead_letters is not None:
            self._dead_letters.record(item, outcome)
