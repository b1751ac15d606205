"""JSON logging for the API: one object per line, tagged with request and caller."""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from .config import Settings
from .context import NO_REQUEST_ID, get_request_id, get_user_id

# Attributes every LogRecord carries; anything else on a record came from ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

# Emitted by the request logging middleware and the error handlers.
HTTP_FIELDS = ("method", "path", "status_code", "duration_ms", "client", "user_agent")


class JsonLogFormatter(logging.Formatter):
    """Render a record as JSON.

    Request fields listed in ``HTTP_FIELDS`` are grouped under ``"http"``.
    Other ``extra`` values are copied to the top level.
    """

    def __init__(self, *, service: str, environment: str) -> None:
        super().__init__()
        self._service = service
        self._environment = environment

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self._service,
            "environment": self._environment,
            "request_id": getattr(record, "request_id", NO_REQUEST_ID),
        }
        user_id = getattr(record, "user_id", None)
        if user_id:
            payload["user_id"] = user_id

        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in ("request_id", "user_id")
        }
        http = {name: extras.pop(name) for name in HTTP_FIELDS if name in extras}
        if http:
            payload["http"] = http
        for key, value in extras.items():
            payload.setdefault(key, value)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp records with the current request id and, once known, the caller's id."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.request_id = get_request_id()
        record.user_id = get_user_id()
        return True


def configure_logging(settings: Settings) -> None:
    """Route the root and uvicorn loggers to one JSON stdout handler."""

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.captureWarnings(True)

    def routed(logger_level: int = level) -> dict[str, Any]:
        return {"handlers": ["stdout"], "level": logger_level, "propagate": False}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": JsonLogFormatter,
                    "service": settings.project_name,
                    "environment": settings.environment,
                }
            },
            "filters": {"request_context": {"()": RequestContextFilter}},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "json",
                    "filters": ["request_context"],
                }
            },
            "loggers": {
                "": {"handlers": ["stdout"], "level": level},
                "uvicorn": routed(),
                "uvicorn.error": routed(),
                # Requests are logged by RequestLoggingMiddleware.
                "uvicorn.access": routed(logging.WARNING),
            },
        }
    )


__all__ = ["HTTP_FIELDS", "JsonLogFormatter", "RequestContextFilter", "configure_logging"]
