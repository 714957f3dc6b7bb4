"""Utilities for configuring structured logging."""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import settings


_LOG_RECORD_RESERVED_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "asctime",
}

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self.serialize_record(record), ensure_ascii=False)

    def serialize_record(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Convert a log record into a JSON-compatible payload."""
        created_at = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "service": self.service_name,
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
            "created_at": created_at.isoformat(),
        }

        if record.exc_info:
            payload["traceback"] = "".join(traceback.format_exception(*record.exc_info))
        elif record.exc_text:
            payload["traceback"] = record.exc_text

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _LOG_RECORD_RESERVED_KEYS and not key.startswith("_")
        }
        if extra:
            sanitized: Dict[str, Any] = {}
            for key, value in extra.items():
                try:
                    json.dumps(value)
                    sanitized[key] = value
                except (TypeError, ValueError):
                    sanitized[key] = repr(value)
            payload["extra"] = sanitized

        return payload


_handler_instance: Optional[logging.Handler] = None


def configure_logging(
    service_name: Optional[str] = None,
    level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> logging.Handler:
    """Attach a stdout handler to the root logger (idempotent)."""
    global _handler_instance

    level_name = (level or settings.log_level).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    if _handler_instance is not None:
        # Already configured for this process.
        _handler_instance.setLevel(numeric_level)
        return _handler_instance

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    if (log_format or settings.log_format).lower() == "json":
        handler.setFormatter(JsonFormatter(service_name or settings.app_name))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root_logger.addHandler(handler)
    _handler_instance = handler
    return handler


def reset_logging() -> None:
    """Remove the handler installed by :func:`configure_logging`."""
    global _handler_instance

    if _handler_instance is None:
        return
    logging.getLogger().removeHandler(_handler_instance)
    _handler_instance = None
