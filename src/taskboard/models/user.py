"""User domain models built with SQLModel."""

from __future__ import annotations

from enum import Enum
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import TimestampMixin


class UserRole(str, Enum):
    """Roles supported by the authorization layer."""

    ADMIN = "admin"
    USER = "user"


def enum_values(enum_type: type[Enum]) -> list[str]:
    """Persist enum members by value rather than by name."""
    return [member.value for member in enum_type]


class UserBase(SQLModel, table=False):
    """Shared attributes for user models."""

    email: str = Field(
        max_length=320,
        sa_column=sa.Column(sa.String(length=320), nullable=False, unique=True),
    )
    first_name: str = Field(
        max_length=50,
        sa_column=sa.Column(sa.String(length=50), nullable=False),
    )
    last_name: str = Field(
        max_length=50,
        sa_column=sa.Column(sa.String(length=50), nullable=False),
    )
    role: UserRole = Field(
        default=UserRole.USER,
        sa_column=sa.Column(
            sa.Enum(UserRole, name="user_role", native_enum=False, values_callable=enum_values),
            nullable=False,
            server_default=UserRole.USER.value,
        ),
    )
    is_active: bool = Field(
        default=True,
        sa_column=sa.Column(sa.Boolean(), nullable=False, server_default=sa.true()),
    )


class User(UserBase, TimestampMixin, table=True):
    """Persistent user model. ``hashed_password`` never leaves the service layer."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    hashed_password: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )


__all__ = ["User", "UserBase", "UserRole", "enum_values"]
