"""
Logging for the registrar service.

Every record carries the request id of the request it was emitted under
(``request_id`` attribute, stamped by ``RequestIdFilter``). Structured fields
go in ``data=`` on a ``ContextLogger``; credential material in those fields is
replaced with ``REDACTED`` before formatting, whichever formatter is used.
"""

import json
import logging
import sys
from collections.abc import Mapping
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# Request-scoped id, set by RequestContextMiddleware
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = frozenset(
    {"password", "email", "salt", "key", "encoded_hash", "password_hash"}
)


def redact(data: Any) -> Any:
    """Copy ``data`` with values under sensitive keys replaced, at any depth."""
    if isinstance(data, Mapping):
        return {
            k: REDACTED if str(k).lower() in SENSITIVE_KEYS else redact(v)
            for k, v in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact(v) for v in data]
    return data


class RequestIdFilter(logging.Filter):
    """Stamp ``record.request_id`` from context unless the caller passed one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_ctx.get()
        return True


def _record_fields(record: logging.LogRecord) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "timestamp": datetime.fromtimestamp(record.created, UTC)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z"),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    request_id = getattr(record, "request_id", None)
    if request_id:
        fields["request_id"] = request_id
    data = getattr(record, "data", None)
    if data:
        fields["data"] = redact(data)
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        fields = _record_fields(record)
        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)
        return json.dumps(fields, default=str)


class ConsoleFormatter(logging.Formatter):
    """``timestamp LEVEL [request] logger: message key=value ...``"""

    def format(self, record: logging.LogRecord) -> str:
        fields = _record_fields(record)
        line = (
            f"{fields['timestamp']} {fields['level']:<8} "
            f"[{fields.get('request_id', '-')}] {fields['logger']}: {fields['message']}"
        )
        for k, v in fields.get("data", {}).items():
            line += f" {k}={v}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter accepting ``data=`` (structured fields) and ``request_id=``."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        if "data" in kwargs:
            extra["data"] = kwargs.pop("data")
        if "request_id" in kwargs:
            extra["request_id"] = kwargs.pop("request_id")
        kwargs["extra"] = extra
        return msg, kwargs


_loggers: dict[str, ContextLogger] = {}


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger."""
    if name not in _loggers:
        _loggers[name] = ContextLogger(logging.getLogger(name), {})
    return _loggers[name]


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: str | None = None,
) -> None:
    """
    Configure root logging.

    Args:
        level: Root log level name.
        json_output: JSON lines on stdout instead of the console format.
        log_file: Optional path; the file always receives JSON lines.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    root_logger.handlers.clear()

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter() if json_output else ConsoleFormatter())
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.addFilter(RequestIdFilter())
        root_logger.addHandler(handler)

    # SQL echo would print bound parameters, including password hashes.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
