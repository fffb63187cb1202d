"""
Review Pipeline Logging
=======================

Log output for the review services.

Moderation, ingestion and the API facade attach review context to their
records (`extra={"review_id": ..., "action": ...}`); a sync additionally binds
its batch id for every record emitted while it runs. Both formatters render
that context, and provider credentials that end up in a message (the Places
API key travels in the query string) are masked before anything is written.

Usage:
    from src.orchestrator.logging_config import log_context, setup_logging_from_settings

    setup_logging_from_settings()

    with log_context(batch_id=batch_id):
        ...
"""

import contextvars
import json
import logging
import logging.handlers
import os
import re
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

# Record attributes rendered by the formatters, in output order
CONTEXT_FIELDS = ("batch_id", "source", "property_id", "review_id", "action", "duration")

_SECRET_PARAM = re.compile(r"\b(key|api_key|apikey|client_secret|access_token)=([^&\s\"']+)", re.IGNORECASE)
_BEARER = re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+")

_bound_context: contextvars.ContextVar = contextvars.ContextVar("review_log_context", default={})


def redact(text: str) -> str:
    """Mask credentials in query strings and Authorization headers."""
    text = _SECRET_PARAM.sub(r"\1=***", text)
    return _BEARER.sub(r"\1***", text)


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind context fields to every record logged inside the block."""
    merged = dict(_bound_context.get())
    merged.update({k: v for k, v in fields.items() if v is not None})
    token = _bound_context.set(merged)
    try:
        yield
    finally:
        _bound_context.reset(token)


class ReviewContextFilter(logging.Filter):
    """Copies bound context onto records that did not set the field themselves."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _bound_context.get().items():
            if getattr(record, key, None) is None:
                setattr(record, key, value)
        return True


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    context = {}
    for key in CONTEXT_FIELDS:
        value = getattr(record, key, None)
        if value is not None:
            context[key] = value
    return context


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

        {"ts": "2024-...", "level": "INFO", "logger": "src.moderation...", "msg": "...", "review_id": "..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": redact(record.getMessage()),
        }
        entry.update(record_context(record))
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = redact(self.formatException(record.exc_info))
        return json.dumps(entry, default=str)


class ReadableFormatter(logging.Formatter):
    """Console format with the review context appended as key=value pairs."""

    def __init__(self):
        super().__init__(
            "%(asctime)s [%(levelname)-8s] %(name)-36s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = redact(super().format(record))
        context = record_context(record)
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line


def build_handlers(
    json_output: bool = False,
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> List[logging.Handler]:
    """Console handler, plus a rotating file handler when log_file is set."""
    formatter = JSONFormatter() if json_output else ReadableFormatter()
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count,
        ))

    context_filter = ReviewContextFilter()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
    return handlers


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
):
    """
    Replace the root handlers with the review pipeline's.

    Args:
        level: Root log level name; unknown names fall back to INFO
        json_output: JSON lines instead of the readable format
        log_file: Also write to this file, rotated at max_bytes
        max_bytes: Rotation size
        backup_count: Rotated files kept
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    for handler in build_handlers(json_output, log_file, max_bytes, backup_count):
        root.addHandler(handler)

    # requests/urllib3 log full URLs, SQLAlchemy logs every statement
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    root.debug(f"Logging configured: level={level} json={json_output} file={log_file or 'none'}")


def setup_logging_from_settings(config=None) -> None:
    """Configure logging from LOG_LEVEL / LOG_JSON / LOG_FILE."""
    if config is None:
        from ..data.config import get_settings
        config = get_settings().logging
    setup_logging(level=config.level, json_output=config.json_logs, log_file=config.log_file)
