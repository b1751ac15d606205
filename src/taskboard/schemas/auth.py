"""Schemas describing authentication payloads."""

from __future__ import annotations

import re

from pydantic import EmailStr, Field, field_validator

from .common import CamelModel, RequestModel
from .user import UserPublic

_PASSWORD_STRENGTH = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*(?:\d|\W)).+$")


class RegisterRequest(RequestModel):
    """Incoming payload for registering a new user."""

    email: EmailStr
    password: str = Field(min_length=8, max_length=32)
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)

    @field_validator("password")
    @classmethod
    def _check_strength(cls, value: str) -> str:
        if not _PASSWORD_STRENGTH.match(value):
            raise ValueError(
                "Password must contain an uppercase letter, a lowercase letter "
                "and a number or special character."
            )
        return value


class LoginRequest(RequestModel):
    email: EmailStr
    password: str = Field(min_length=8)


class AuthResponse(CamelModel):
    """Authenticated user together with a freshly issued access token."""

    user: UserPublic
    access_token: str
    token_type: str = Field(default="bearer", frozen=True)
    expires_in: int


__all__ = ["AuthResponse", "LoginRequest", "RegisterRequest"]
