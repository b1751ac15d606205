"""Routes handling user registration and login."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...core.security import GeneratedToken
from ...deps import PUBLIC, DatabaseSessionDependency, SettingsDependency, require_access
from ...models import User
from ...schemas import AuthResponse, LoginRequest, RegisterRequest, UserPublic
from ...services import AuthService

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
    dependencies=[Depends(require_access(PUBLIC))],
)


def _build_response(user: User, token: GeneratedToken) -> AuthResponse:
    return AuthResponse(
        user=UserPublic.model_validate(user),
        access_token=token.token,
        expires_in=token.expires_in,
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register(
    payload: RegisterRequest,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> AuthResponse:
    service = AuthService(session, settings)
    user, token = await service.register(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    return _build_response(user, token)


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Authenticate using email and password",
)
async def login(
    payload: LoginRequest,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> AuthResponse:
    service = AuthService(session, settings)
    user, token = await service.login(email=payload.email, password=payload.password)
    return _build_response(user, token)
