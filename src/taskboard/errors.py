"""Error taxonomy and the handlers that map failures onto the response envelope."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import REQUEST_ID_HEADER
from .schemas.system import ErrorResponse

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """Base class for failures that are reported to the caller as-is."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "bad_request"
    default_message: str = "Bad request."

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        code: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.headers = dict(headers or {})


class ValidationError(ApplicationError):
    """Input that fails validation."""

    default_message = "Validation failed."


class UnauthorizedError(ApplicationError):
    """Credentials are missing or not valid."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"
    default_message = "Unauthorized."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(ApplicationError):
    """Authenticated but not permitted."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Forbidden resource."


class NotFoundError(ApplicationError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Resource not found."


class ConflictError(ApplicationError):
    """A unique key is already taken."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Resource already exists."


class ServerError(ApplicationError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "server_error"
    default_message = "Internal server error."


_HTTP_STATUS_CODE_MAP: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
    status.HTTP_429_TOO_MANY_REQUESTS: "rate_limited",
}


def _error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str | list[str],
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(
        status_code=status_code,
        timestamp=datetime.now(timezone.utc),
        path=request.url.path,
        method=request.method,
        message=message,
        error=code,
    )
    response = JSONResponse(
        status_code=status_code,
        content=payload.model_dump(mode="json", by_alias=True),
    )
    if headers:
        response.headers.update(headers)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def _format_validation_errors(errors: Sequence[Any]) -> list[str]:
    """Flatten pydantic error entries into ``"field: reason"`` strings."""

    messages: list[str] = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        reason = str(error.get("msg", "Invalid value"))
        messages.append(f"{'.'.join(location)}: {reason}" if location else reason)
    return messages


def _http_exception_message(status_code: int, detail: Any) -> str | list[str]:
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        return [str(item) for item in detail]
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the provided FastAPI app."""

    @app.exception_handler(ApplicationError)
    async def _handle_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Application error encountered: %s", exc.message, exc_info=exc)
        else:
            logger.warning(
                "Request rejected: %s",
                exc.message,
                extra={"code": exc.code, "status_code": exc.status_code, "path": request.url.path},
            )
        return _error_response(
            request,
            status_code=exc.status_code,
            code=exc.code,
            message=exc.message,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        messages = _format_validation_errors(exc.errors())
        logger.warning("Request validation failed", extra={"errors": messages})
        return _error_response(
            request,
            status_code=ValidationError.status_code,
            code=ValidationError.code,
            message=messages,
        )

    @app.exception_handler(IntegrityError)
    async def _handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
        logger.error("Database integrity error encountered.", exc_info=exc)
        return _error_response(
            request,
            status_code=ConflictError.status_code,
            code=ConflictError.code,
            message="Database integrity violation.",
        )

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_exception(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        code = _HTTP_STATUS_CODE_MAP.get(exc.status_code, "http_error")
        logger.warning(
            "HTTP exception raised",
            extra={"code": code, "status_code": exc.status_code, "path": request.url.path},
        )
        return _error_response(
            request,
            status_code=exc.status_code,
            code=code,
            message=_http_exception_message(exc.status_code, exc.detail),
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def _handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled application error on %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return _error_response(
            request,
            status_code=ServerError.status_code,
            code=ServerError.code,
            message=ServerError.default_message,
        )


__all__ = [
    "ApplicationError",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "ServerError",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
]
