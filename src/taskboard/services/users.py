"""Service layer orchestrating user-related repository operations."""

from __future__ import annotations

from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.cache import invalidate_task_cache
from ..core.security import get_password_hash
from ..errors import ForbiddenError, NotFoundError
from ..models import User, UserRole
from ..repositories import TaskRepository, UserRepository
from ..schemas import PageMeta, PageParams, UserListResponse, UserPublic, UserUpdate


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


class UserService:
    """High-level business operations for ``User`` entities."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = UserRepository(session)

    async def create_user(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.USER,
        is_active: bool = True,
    ) -> User:
        """Create and persist a new user record."""
        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=is_active,
            hashed_password=get_password_hash(password),
        )
        await self._repository.add(user)
        await self._session.commit()
        await self._repository.refresh(user)
        return user

    async def get_user_by_email(self, email: str) -> User | None:
        """Fetch a user by their unique email address."""
        return await self._repository.get_by_email(email)

    async def get_user(self, user_id: UUID) -> User:
        """Fetch a user by primary key, raising ``NotFoundError`` when absent."""
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    async def list_users(self, params: PageParams) -> UserListResponse:
        """Return one page of users, newest first."""
        users, total = await self._repository.list_paginated(limit=params.limit, offset=params.offset)
        return UserListResponse(
            data=[UserPublic.model_validate(user) for user in users],
            meta=PageMeta.build(total=total, page=params.page, limit=params.limit),
        )

    async def update_user(self, user_id: UUID, patch: UserUpdate, caller: User) -> User:
        """Apply a profile patch. Only the user themself or an admin may do so."""
        if caller.id != user_id and not is_admin(caller):
            raise ForbiddenError("You can only update your own profile")
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        if "role" in changes and not is_admin(caller):
            raise ForbiddenError("Only admins can change user roles")

        user = await self.get_user(user_id)
        for field_name, value in changes.items():
            setattr(user, field_name, value)
        self._session.add(user)
        await self._session.commit()
        await self._repository.refresh(user)
        return user

    async def deactivate_user(self, user_id: UUID, caller: User) -> None:
        """Soft delete: mark the account inactive."""
        if not is_admin(caller):
            raise ForbiddenError("Only admins can delete users")
        user = await self.get_user(user_id)
        user.is_active = False
        self._session.add(user)
        await self._session.commit()

    async def delete_user_permanently(self, user_id: UUID, caller: User) -> None:
        """Remove the account and every task it owns."""
        if not is_admin(caller):
            raise ForbiddenError("Only admins can permanently delete users")
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        await TaskRepository(self._session).delete_for_owner(user_id)
        await self._repository.delete(user)
        await self._session.commit()
        await invalidate_task_cache()


__all__ = ["UserService", "is_admin"]
