"""Unit tests for the HTTP document submitter using httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from crpt_api.adapters.transport import HttpDocumentSubmitter
from crpt_api.adapters.transport.http_client import serialize_document
from crpt_api.core.logging import get_doc_id
from crpt_api.schemas.document import Document
from crpt_api.utils.dead_letter import FailedSubmissionLog

URL = "https://registry.test/api/v3/lk/documents/create"


def _submitter(
    handler: Callable[[httpx.Request], httpx.Response],
    dead_letters: FailedSubmissionLog | None = None,
) -> HttpDocumentSubmitter:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpDocumentSubmitter(URL, client=client, dead_letters=dead_letters)


def test_posts_json_document_with_wire_field_names(document: Document) -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, text='{"value": "ok"}')

    outcome = _submitter(handler).send(document)

    assert outcome.ok is True
    assert outcome.status_code == 200
    assert outcome.body == '{"value": "ok"}'
    assert outcome.doc_id == "doc-1"

    request = captured[0]
    assert request.method == "POST"
    assert str(request.url) == URL
    assert request.headers["Content-Type"] == "application/json"
    body = json.loads(request.content)
    assert body["description"] == {"participantInn": "7700000003"}
    assert body["importRequest"] is True
    assert body["products"][0]["tnved_code"] == "6401100000"
    assert request.content.decode("utf-8") == serialize_document(document)


def test_mapping_documents_are_posted_as_json() -> None:
    captured: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request.content)
        return httpx.Response(201)

    outcome = _submitter(handler).send({"doc_id": 7, "doc_type": "LP_INTRODUCE_GOODS"})

    assert outcome.ok is True
    assert outcome.doc_id == "7"
    assert json.loads(captured[0]) == {"doc_id": 7, "doc_type": "LP_INTRODUCE_GOODS"}


def test_non_success_status_is_reported_and_recorded(document: Document) -> None:
    dead_letters = FailedSubmissionLog()
    submitter = _submitter(lambda request: httpx.Response(500, text="oops"), dead_letters)

    outcome = submitter.send(document)

    assert outcome.ok is False
    assert outcome.status_code == 500
    assert outcome.body == "oops"
    assert outcome.error == "HTTP 500"
    assert [entry.item for entry in dead_letters.entries()] == [document]


def test_transport_error_is_caught_and_recorded(
    document: Document, caplog: pytest.LogCaptureFixture
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    dead_letters = FailedSubmissionLog()
    outcome = _submitter(handler, dead_letters).send(document)

    assert outcome.ok is False
    assert outcome.status_code is None
    assert "connection refused" in (outcome.error or "")
    assert dead_letters.stats()["recorded"] == 1
    assert "submission.failed" in caplog.text


def test_timeout_is_reported_as_transport_timeout(document: Document) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    outcome = _submitter(handler).send(document)

    assert outcome.ok is False
    assert "timed out" in (outcome.error or "")


def test_unserializable_document_never_hits_the_network() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    dead_letters = FailedSubmissionLog()
    outcome = _submitter(handler, dead_letters).send({"doc_id": "x", "when": object()})

    assert outcome.ok is False
    assert "serialized" in (outcome.error or "")
    assert calls == []
    assert len(dead_letters) == 1


def test_doc_id_context_is_cleared_after_send(document: Document) -> None:
    _submitter(lambda request: httpx.Response(200)).send(document)

    assert get_doc_id() is None


def test_close_only_closes_owned_client() -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    HttpDocumentSubmitter(URL, client=client).close()
    assert client.is_closed is False

    owned = HttpDocumentSubmitter(URL, timeout_seconds=1.0)
    owned.close()
    assert owned._client.is_closed is True  # noqa: SLF001
