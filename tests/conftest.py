"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any import that might load settings,
so a developer's local .env file never leaks into the tests.
"""

import os

os.environ["APP_ENV"] = "testing"
os.environ.setdefault("CRPT_BASE_URL", "https://registry.test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest  # noqa: E402

from crpt_api.schemas.document import Document  # noqa: E402
from tests.factories import FakeTimerFactory, make_document  # noqa: E402


@pytest.fixture
def timers() -> FakeTimerFactory:
    return FakeTimerFactory()


@pytest.fixture
def document() -> Document:
    return make_document()
