"""Structured JSON logging for the outfit engine.

Every engine log line is a JSON object carrying an ``event`` name and the
correlation id of the request that produced it. Extra fields are scrubbed
before they are written: user identifiers, locations and free-text notes are
masked, and wardrobe objects are reduced to a short summary.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import re
import uuid
from typing import Any, Dict, Iterator, Optional

CORRELATION_ID: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRIBUTES = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "taskName"}

SENSITIVE_KEYS = frozenset({"user_id", "email", "location", "brands", "notes", "comments"})

_EMAIL_PATTERN = re.compile(r"[\w.\-]+@[\w.\-]+")
_ENGINE_HANDLER_FLAG = "_outfit_engine_handler"


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = super().format(record)
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", message),
            "message": message,
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES and key not in payload:
                payload[key] = redact_for_log(value)
        return json.dumps(payload, default=str)


def configure_logging(level: int | str | None = None) -> None:
    """Install the JSON handler on the root logger.

    Repeated calls replace the handler installed by a previous call and leave
    handlers added by the host application untouched.
    """

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _ENGINE_HANDLER_FLAG, False):
            root.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    setattr(handler, _ENGINE_HANDLER_FLAG, True)
    root.addHandler(handler)
    root.setLevel(level or os.getenv("LOG_LEVEL", "INFO"))


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring JSON output if nothing else has."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def _summarize(value: Any) -> Optional[str]:
    """Short description of wardrobe objects, ``None`` for anything else."""

    category = getattr(value, "category", None)
    if category is not None and hasattr(value, "colors"):
        return f"<item {getattr(category, 'value', category)}>"
    items = getattr(value, "items", None)
    if isinstance(items, list) and hasattr(value, "formality"):
        return f"<outfit {len(items)} items>"
    return None


def redact_for_log(payload: Any) -> Any:
    """Recursively mask personal details before they reach a log line."""

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        if payload.lower().startswith("http"):
            return "[redacted-url]"
        return _EMAIL_PATTERN.sub("[redacted-email]", payload)
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if key in SENSITIVE_KEYS else redact_for_log(value) for key, value in payload.items()
        }
    if isinstance(payload, (list, tuple, set, frozenset)):
        return [redact_for_log(value) for value in payload]
    summary = _summarize(payload)
    if summary is not None:
        return summary
    return redact_for_log(str(payload))


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Adopt ``correlation_id``, or keep the current one, or start a new one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    generated = uuid.uuid4().hex
    CORRELATION_ID.set(generated)
    return generated


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Set a correlation id for the block and restore the previous one after."""

    token = CORRELATION_ID.set(correlation_id or ensure_correlation_id())
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with redacted ``fields`` attached as record attributes."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    extra = {"event": event, "correlation_id": correlation_id}
    extra.update(redact_for_log(fields))
    logger.log(level, event, exc_info=exc_info, extra=extra)


@contextlib.contextmanager
def operation_context(name: str, **attributes: Any) -> Iterator[str]:
    """Run a block of engine work under one correlation id."""

    with correlation_context(attributes.pop("correlation_id", None)) as correlation_id:
        log_event(
            logging.getLogger(__name__),
            logging.DEBUG,
            "operation_scope",
            operation=name,
            correlation_id=correlation_id,
            **attributes,
        )
        yield correlation_id


__all__ = [
    "CORRELATION_ID",
    "JsonFormatter",
    "SENSITIVE_KEYS",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
]
