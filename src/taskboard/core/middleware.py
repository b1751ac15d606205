"""Application middleware implementations."""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .context import REQUEST_ID_HEADER, bind_request_context, reset_request_context

http_logger = logging.getLogger("taskboard.http")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Attach a correlation identifier to each request/response cycle."""

    def __init__(self, app, header_name: str = REQUEST_ID_HEADER):  # type: ignore[override]
        super().__init__(app)
        self._header_name = header_name

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = request.headers.get(self._header_name) or self._generate_request_id()
        token = bind_request_context(request_id)
        request.state.request_id = request_id
        try:
            response = await call_next(request)
        finally:
            reset_request_context(token)
        response.headers.setdefault(self._header_name, request_id)
        return response

    @staticmethod
    def _generate_request_id() -> str:
        return str(uuid.uuid4())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every incoming request and its completion with status and duration."""

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        method = request.method
        path = request.url.path
        request_fields = {
            "method": method,
            "path": path,
            "client": request.client.host if request.client else "-",
            "user_agent": request.headers.get("user-agent", ""),
        }
        started = time.perf_counter()

        http_logger.info("Incoming request %s %s", method, path, extra=request_fields)
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        http_logger.info(
            "Completed request %s %s %d",
            method,
            path,
            response.status_code,
            extra={**request_fields, "status_code": response.status_code, "duration_ms": elapsed_ms},
        )
        return response


__all__ = ["CorrelationIdMiddleware", "RequestLoggingMiddleware"]
