"""Per-request context shared by the middleware, the access guard and the log filter."""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass
from uuid import UUID

REQUEST_ID_HEADER = "X-Request-ID"
NO_REQUEST_ID = "-"


@dataclass(slots=True)
class RequestContext:
    """Identity of the request being served.

    ``user_id`` is filled in by the access guard once the caller is known, so
    log lines emitted after authentication can be attributed to a tenant.
    """

    request_id: str
    user_id: str | None = None


_request_context: ContextVar[RequestContext | None] = ContextVar("taskboard_request_context", default=None)


def bind_request_context(request_id: str) -> Token[RequestContext | None]:
    """Start a fresh context for one request. Pass the token to ``reset_request_context``."""

    return _request_context.set(RequestContext(request_id=request_id))


def reset_request_context(token: Token[RequestContext | None]) -> None:
    _request_context.reset(token)


def get_request_id() -> str:
    context = _request_context.get()
    return context.request_id if context else NO_REQUEST_ID


def get_user_id() -> str | None:
    context = _request_context.get()
    return context.user_id if context else None


def bind_user_id(user_id: UUID | str) -> None:
    """Record the authenticated caller on the current request, if there is one."""

    context = _request_context.get()
    if context is not None:
        context.user_id = str(user_id)


__all__ = [
    "NO_REQUEST_ID",
    "REQUEST_ID_HEADER",
    "RequestContext",
    "bind_request_context",
    "bind_user_id",
    "get_request_id",
    "get_user_id",
    "reset_request_context",
]
