"""Process logging for the IAM API.

Two output formats are supported: a single-line console format for local
work and one JSON object per line for log shippers. Structured fields travel
through ``extra=log_context(...)`` and every line carries the correlation ID
bound by :class:`~iam_api.common.middleware.RequestContextMiddleware`.
"""

from __future__ import annotations

import json
import logging
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from iam_api.settings import Settings

SERVICE_NAME = "iam-api"

_CORRELATION_ID: ContextVar[str | None] = ContextVar("iam_api_correlation_id", default=None)

# Attributes every LogRecord carries, plus the ones formatting adds.
_RESERVED_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "correlation_id", "color_message"}

_CONFIGURED_FLAG = "_iam_configured"

# Loggers whose own handlers are dropped so they write through the root handler.
_PROPAGATING_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "iam_api.request",
    "httpx",
    "httpcore",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
)


class _UtcTimestampMixin:
    _time_format = "%Y-%m-%dT%H:%M:%S"

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        moment = datetime.fromtimestamp(record.created, tz=UTC)
        return f"{moment.strftime(datefmt or self._time_format)}.{int(record.msecs):03d}Z"


class ConsoleLogFormatter(_UtcTimestampMixin, logging.Formatter):
    """``<time> <level> <logger> [cid=<id>] <event> key=value ...``"""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-5s %(name)s [cid=%(correlation_id)s] %(message)s",
            datefmt=self._time_format,
        )

    def format(self, record: logging.LogRecord) -> str:
        _stamp_correlation_id(record)
        line = super().format(record)
        fields = _record_fields(record)
        if not fields:
            return line
        rendered = " ".join(
            f"{key}={'null' if value is None else value}" for key, value in sorted(fields.items())
        )
        return f"{line} {rendered}"


class JsonLogFormatter(_UtcTimestampMixin, logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": _stamp_correlation_id(record),
            **_record_fields(record),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


def setup_logging(settings: Settings) -> None:
    """Install one root StreamHandler and align library loggers with ``settings``.

    Safe to call more than once; later calls replace the formatter and levels.
    """

    root = logging.getLogger()
    level = logging.getLevelName(settings.log_level)

    if not getattr(root, _CONFIGURED_FLAG, False) or not root.handlers:
        root.handlers = [logging.StreamHandler()]
        setattr(root, _CONFIGURED_FLAG, True)
    else:
        root.handlers = root.handlers[:1]
    root.handlers[0].setFormatter(
        JsonLogFormatter() if settings.log_format == "json" else ConsoleLogFormatter()
    )
    root.setLevel(level)

    for name in _PROPAGATING_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.handlers.clear()
        library_logger.propagate = True
        library_logger.disabled = False
        library_logger.setLevel(logging.NOTSET)

    store_level = logging.getLevelName(settings.database_log_level or "WARNING")
    levels = {
        "uvicorn": level,
        "uvicorn.error": level,
        "iam_api.request": logging.getLevelName(settings.effective_request_log_level),
        # httpx logs every CouchDB round trip at INFO.
        "httpx": logging.WARNING,
        "httpcore": logging.WARNING,
        "sqlalchemy": store_level,
        "sqlalchemy.engine": store_level,
        "sqlalchemy.pool": store_level,
    }
    for name, logger_level in levels.items():
        logging.getLogger(name).setLevel(logger_level)

    if not settings.access_log_enabled:
        access = logging.getLogger("uvicorn.access")
        access.propagate = False
        access.disabled = True


def bind_request_context(correlation_id: str | None) -> None:
    _CORRELATION_ID.set(correlation_id)


def clear_request_context() -> None:
    _CORRELATION_ID.set(None)


def current_request_id() -> str | None:
    return _CORRELATION_ID.get()


def log_context(
    *,
    entity_type: str | None = None,
    entity_id: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build the ``extra`` mapping for a structured log call.

    ``entity_type``/``entity_id`` are dropped when not given so list and
    infrastructure events do not carry empty entity fields::

        logger.info(
            "users.update.success",
            extra=log_context(entity_type="user", entity_id=user_id, rev=rev),
        )
    """

    fields: dict[str, Any] = {}
    if entity_type is not None:
        fields["entity_type"] = entity_type
    if entity_id is not None:
        fields["entity_id"] = entity_id
    fields.update(extra)
    return fields


def _stamp_correlation_id(record: logging.LogRecord) -> str:
    cid = getattr(record, "correlation_id", None) or _CORRELATION_ID.get() or "-"
    record.correlation_id = cid
    return cid


def _record_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


__all__ = [
    "ConsoleLogFormatter",
    "JsonLogFormatter",
    "SERVICE_NAME",
    "bind_request_context",
    "clear_request_context",
    "current_request_id",
    "log_context",
    "setup_logging",
]
