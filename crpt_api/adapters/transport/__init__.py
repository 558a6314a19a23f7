"""Transport adapter layer - delivers single documents to the registration API."""

from crpt_api.adapters.transport.base import AbstractSubmitter, SubmissionOutcome
from crpt_api.adapters.transport.http_client import HttpDocumentSubmitter

__all__ = [
    "AbstractSubmitter",
    "HttpDocumentSubmitter",
    "SubmissionOutcome",
]
