"""Authentication service encapsulating registration, login and token resolution."""

from __future__ import annotations

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import Settings
from ..core.security import GeneratedToken, TokenPayload, TokenService, verify_password
from ..errors import ConflictError, UnauthorizedError
from ..models import User, UserRole
from ..repositories import UserRepository
from .users import UserService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
ACCOUNT_DEACTIVATED_MESSAGE = "Account is deactivated"


class AuthService:
    """High-level authentication workflows."""

    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._tokens = TokenService(settings)
        self._user_service = UserService(session)
        self._user_repository = UserRepository(session)

    def issue_token(self, user: User) -> GeneratedToken:
        return self._tokens.issue(user.id, user.email)

    async def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> tuple[User, GeneratedToken]:
        """Create a regular, active account and sign a token for it."""
        existing = await self._user_service.get_user_by_email(email)
        if existing is not None:
            raise ConflictError("User with this email already exists")
        user = await self._user_service.create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=UserRole.USER,
            is_active=True,
        )
        logger.info("Registered user", extra={"user_id": str(user.id)})
        return user, self.issue_token(user)

    async def login(self, *, email: str, password: str) -> tuple[User, GeneratedToken]:
        """Verify credentials.

        Unknown emails and wrong passwords share one message; a deactivated
        account is reported as such.
        """
        user = await self._user_service.get_user_by_email(email)
        if user is None:
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)
        if not user.is_active:
            raise UnauthorizedError(ACCOUNT_DEACTIVATED_MESSAGE)
        if not verify_password(password, user.hashed_password):
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)
        return user, self.issue_token(user)

    async def validate_from_token_payload(self, payload: TokenPayload) -> User | None:
        """Re-fetch the token's subject; ``None`` if it is gone or inactive."""
        user = await self._user_repository.get(payload.sub)
        if user is None or not user.is_active:
            return None
        return user


__all__ = ["ACCOUNT_DEACTIVATED_MESSAGE", "INVALID_CREDENTIALS_MESSAGE", "AuthService"]
