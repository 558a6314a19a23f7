"""Submitter interface and the outcome value every delivery reports."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result of delivering one document.

    Attributes:
        ok: Whether the API accepted the document (2xx response).
        doc_id: Identifier of the document, when it has one.
        status_code: HTTP status, None if no response was received.
        body: Raw response body, None if no response was received.
        error: Failure description when ok is False.
    """

    ok: bool
    doc_id: str | None = None
    status_code: int | None = None
    body: str | None = None
    error: str | None = None


def document_id(item: Any) -> str | None:
    """Return the doc_id of a model or mapping, if it has one."""

    if isinstance(item, Mapping):
        doc_id = item.get("doc_id")
    else:
        doc_id = getattr(item, "doc_id", None)
    return None if doc_id is None else str(doc_id)


class AbstractSubmitter(ABC):
    """Interface for clients that deliver one document per call."""

    @abstractmethod
    def send(self, item: Any) -> SubmissionOutcome:
        """Serialize and deliver a single document.

        Args:
            item: Pydantic model or JSON-serializable mapping.

        Returns:
            SubmissionOutcome: Never raises for serialization or transport
            failures; those come back as ``ok=False``.
        """
        ...

    def close(self) -> None:
        """Release transport resources."""
