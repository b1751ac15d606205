"""Reusable FastAPI dependencies, including the access guard."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from .core.config import Settings, get_settings
from .core.context import bind_user_id
from .core.security import InvalidTokenError, TokenService
from .db.session import get_session
from .errors import ForbiddenError, UnauthorizedError
from .models import User, UserRole
from .services import AuthService

SettingsDependency = Annotated[Settings, Depends(get_settings)]

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a database session."""

    async for session in get_session():
        yield session


DatabaseSessionDependency = Annotated[AsyncSession, Depends(get_db_session)]


@dataclass(frozen=True, slots=True)
class AccessPolicy:
    """Per-route access configuration.

    ``public`` routes skip authentication entirely. Otherwise the caller must
    present a valid bearer token and, when ``roles`` is non-empty, hold one of
    the listed roles.
    """

    public: bool = False
    roles: frozenset[UserRole] = field(default_factory=frozenset)

    @classmethod
    def allow_roles(cls, roles: Iterable[UserRole]) -> "AccessPolicy":
        return cls(roles=frozenset(roles))


PUBLIC = AccessPolicy(public=True)
AUTHENTICATED = AccessPolicy()
ADMIN_ONLY = AccessPolicy.allow_roles([UserRole.ADMIN])


async def authenticate(
    credentials: HTTPAuthorizationCredentials | None,
    auth_service: AuthService,
    token_service: TokenService,
) -> User:
    """Resolve the bearer credential to an active user or raise ``UnauthorizedError``."""

    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Missing authentication token")
    try:
        payload = token_service.verify(credentials.credentials)
    except InvalidTokenError as exc:
        raise UnauthorizedError("Invalid or expired token") from exc

    user = await auth_service.validate_from_token_payload(payload)
    if user is None:
        raise UnauthorizedError("Invalid or expired token")
    return user


def authorize(user: User | None, policy: AccessPolicy) -> User:
    """Check ``user`` against the route's allowed roles."""

    if user is None:
        raise ForbiddenError("User not found")
    if policy.roles and user.role not in policy.roles:
        raise ForbiddenError("Insufficient permissions")
    return user


def require_access(policy: AccessPolicy) -> Callable[..., Awaitable[User | None]]:
    """Return a dependency enforcing ``policy`` and yielding the caller."""

    async def _dependency(
        session: DatabaseSessionDependency,
        settings: SettingsDependency,
        credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    ) -> User | None:
        if policy.public:
            return None
        user = await authenticate(
            credentials,
            AuthService(session, settings),
            TokenService(settings),
        )
        bind_user_id(user.id)
        return authorize(user, policy)

    return _dependency


CurrentUserDependency = Annotated[User, Depends(require_access(AUTHENTICATED))]
AdminUserDependency = Annotated[User, Depends(require_access(ADMIN_ONLY))]


__all__ = [
    "ADMIN_ONLY",
    "AUTHENTICATED",
    "PUBLIC",
    "AccessPolicy",
    "AdminUserDependency",
    "CurrentUserDependency",
    "DatabaseSessionDependency",
    "SettingsDependency",
    "authenticate",
    "authorize",
    "get_db_session",
    "require_access",
]
