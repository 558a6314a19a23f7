"""Logging setup for the registration client.

Every log line emitted while a document is being sent carries its ``doc_id``
(set by the submitter through a context variable). Documents hold taxpayer
numbers (INN), so the JSON formatter never writes a document body and masks
INN values in the fields the client logs: INN-named keys are replaced
outright, free text such as ``response_preview`` has 10 and 12 digit runs
masked. Counters like ``pending`` or ``drain_started`` pass through as
native JSON values.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from crpt_api.core.config import LogSettings, settings

REDACTED = "[REDACTED]"

# Keys whose values are document bodies or taxpayer numbers.
REDACTED_KEYS = frozenset(
    {
        "document",
        "payload",
        "owner_inn",
        "participant_inn",
        "participantinn",
        "producer_inn",
    }
)

# INN: 10 digits for organisations, 12 for individuals.
_INN_PATTERN = re.compile(r"(?<!\d)(?:\d{12}|\d{10})(?!\d)")

# Attributes every LogRecord has; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "doc_id"}

_doc_id_var: ContextVar[str | None] = ContextVar("doc_id", default=None)


def set_doc_id(doc_id: str | None) -> None:
    """Tag subsequent logs on this thread with ``doc_id``."""

    _doc_id_var.set(doc_id)


def get_doc_id() -> str | None:
    return _doc_id_var.get()


def clear_doc_id() -> None:
    _doc_id_var.set(None)


def redact(key: str, value: Any) -> Any:
    """Return ``value`` safe to log under ``key``."""

    if key.lower() in REDACTED_KEYS:
        return REDACTED
    if isinstance(value, str):
        return _INN_PATTERN.sub(REDACTED, value)
    return value


class DocumentIdFilter(logging.Filter):
    """Attach doc_id from context when absent on the record."""

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        if getattr(record, "doc_id", None) is None:
            doc_id = get_doc_id()
            if doc_id:
                record.doc_id = doc_id
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record: fixed fields, doc_id, then redacted extras."""

    def __init__(self, *, ensure_ascii: bool = False) -> None:
        super().__init__()
        self.ensure_ascii = ensure_ascii

    def format(self, record: LogRecord) -> str:  # noqa: D401
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        doc_id = getattr(record, "doc_id", None)
        if doc_id is not None:
            data["doc_id"] = doc_id

        for key, value in vars(record).items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            data[key] = redact(key, value)

        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(data, default=str, ensure_ascii=self.ensure_ascii)


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    if log_settings.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    file_path = Path(log_settings.file_path or "logs/crpt_api.log")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if log_settings.max_bytes:
        return RotatingFileHandler(
            file_path,
            maxBytes=log_settings.max_bytes,
            backupCount=log_settings.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(file_path, encoding="utf-8")


def configure_logging(log_settings: LogSettings | None = None) -> None:
    """Install a single root handler as described by ``log_settings``.

    Args:
        log_settings: Optional log settings; defaults to global settings if omitted.
    """

    cfg = log_settings or settings.log

    handler = _build_handler(cfg)
    handler.addFilter(DocumentIdFilter())
    if cfg.format.lower() == "plain":
        # Extras are not rendered in plain mode, so nothing needs masking.
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, cfg.level.upper(), logging.INFO))

    # httpx logs every request at INFO; the submitter already logs outcomes
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
