"""Routes for user profile and account management."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from ...deps import AdminUserDependency, CurrentUserDependency, DatabaseSessionDependency
from ...schemas import PageParams, UserListResponse, UserPublic, UserUpdate
from ...services import UserService

router = APIRouter(prefix="/users", tags=["users"])

PageQuery = Annotated[PageParams, Query()]


@router.get("/me", response_model=UserPublic, summary="Return the caller's profile")
async def read_current_user(current_user: CurrentUserDependency) -> UserPublic:
    return UserPublic.model_validate(current_user)


@router.get("", response_model=UserListResponse, summary="List users (admin only)")
async def list_users(
    session: DatabaseSessionDependency,
    _admin: AdminUserDependency,
    params: PageQuery,
) -> UserListResponse:
    return await UserService(session).list_users(params)


@router.get("/{user_id}", response_model=UserPublic, summary="Retrieve a user by id")
async def read_user(
    user_id: UUID,
    session: DatabaseSessionDependency,
    _current_user: CurrentUserDependency,
) -> UserPublic:
    user = await UserService(session).get_user(user_id)
    return UserPublic.model_validate(user)


@router.patch("/{user_id}", response_model=UserPublic, summary="Update a user profile")
async def update_user(
    user_id: UUID,
    payload: UserUpdate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> UserPublic:
    user = await UserService(session).update_user(user_id, payload, current_user)
    return UserPublic.model_validate(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate a user (admin only)",
)
async def deactivate_user(
    user_id: UUID,
    session: DatabaseSessionDependency,
    admin: AdminUserDependency,
) -> Response:
    await UserService(session).deactivate_user(user_id, admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{user_id}/permanent",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Permanently delete a user and their tasks (admin only)",
)
async def delete_user_permanently(
    user_id: UUID,
    session: DatabaseSessionDependency,
    admin: AdminUserDependency,
) -> Response:
    await UserService(session).delete_user_permanently(user_id, admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
