"""Password hashing and JWT token management."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PayloadValidationError

from .config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class InvalidTokenError(Exception):
    """Raised when a token cannot be trusted."""


class TokenPayload(BaseModel):
    """Validated claims carried by an access token."""

    model_config = ConfigDict(extra="ignore")

    sub: UUID
    email: str
    iat: datetime
    exp: datetime


@dataclass(slots=True)
class GeneratedToken:
    """A signed token together with its expiry metadata."""

    token: str
    expires_at: datetime
    expires_in: int


def get_password_hash(password: str) -> str:
    """Return a hashed representation of ``password``."""

    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hashed counterpart."""

    return pwd_context.verify(plain_password, hashed_password)


class TokenService:
    """Sign and verify stateless access tokens.

    Tokens carry ``sub`` (user id), ``email``, ``iat`` and ``exp`` claims. There is
    no revocation list: a token stays valid until its signature stops matching or
    it expires.
    """

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.jwt_secret_key
        self._algorithm = settings.jwt_algorithm
        self._lifetime = timedelta(minutes=settings.access_token_expire_minutes)

    def issue(
        self,
        subject_id: UUID | str,
        email: str,
        *,
        expires_delta: timedelta | None = None,
    ) -> GeneratedToken:
        now = datetime.now(timezone.utc)
        lifetime = expires_delta if expires_delta is not None else self._lifetime
        expires_at = now + lifetime
        claims: dict[str, Any] = {
            "sub": str(subject_id),
            "email": email,
            "iat": now,
            "exp": expires_at,
        }
        token = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        return GeneratedToken(
            token=token,
            expires_at=expires_at,
            expires_in=int(lifetime.total_seconds()),
        )

    def verify(self, token: str) -> TokenPayload:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidTokenError(str(exc)) from exc
        try:
            return TokenPayload.model_validate(claims)
        except PayloadValidationError as exc:
            raise InvalidTokenError("Token payload is missing required claims.") from exc


__all__ = [
    "GeneratedToken",
    "InvalidTokenError",
    "TokenPayload",
    "TokenService",
    "get_password_hash",
    "verify_password",
]
