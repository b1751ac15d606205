"""User-facing Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field, model_validator

from ..models import UserRole
from .common import CamelModel, PageMeta, RequestModel


class UserPublic(CamelModel):
    """Public representation of a user. The password hash is never exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserUpdate(RequestModel):
    """Partial profile update. ``role`` may only be changed by an admin."""

    first_name: str | None = Field(default=None, min_length=2, max_length=50)
    last_name: str | None = Field(default=None, min_length=2, max_length=50)
    role: UserRole | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "UserUpdate":
        if not self.model_dump(exclude_unset=True, exclude_none=True):
            raise ValueError("At least one field must be provided for update.")
        return self


class UserListResponse(CamelModel):
    data: list[UserPublic]
    meta: PageMeta


__all__ = ["UserListResponse", "UserPublic", "UserUpdate"]
