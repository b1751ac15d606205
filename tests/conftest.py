from __future__ import annotations

import os

os.environ["TASKBOARD_ENVIRONMENT"] = "test"
os.environ["TASKBOARD_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from collections.abc import AsyncIterator, Awaitable, Callable  # noqa: E402
from dataclasses import dataclass  # noqa: E402
from itertools import count  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from taskboard.core.config import Settings, get_settings  # noqa: E402
from taskboard.deps import get_db_session  # noqa: E402
from taskboard.main import create_app  # noqa: E402
from taskboard.models import User, UserRole  # noqa: E402
from taskboard.services import UserService  # noqa: E402

DEFAULT_PASSWORD = "StrongPass123!"


@dataclass(slots=True)
class AuthenticatedUser:
    user: User
    email: str
    password: str
    access_token: str | None

    @property
    def id(self) -> str:
        return str(self.user.id)

    @property
    def headers(self) -> dict[str, str]:
        if not self.access_token:
            raise RuntimeError("User has not been authenticated.")
        return {"Authorization": f"Bearer {self.access_token}"}


@pytest.fixture()
def settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


@pytest.fixture()
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as db_session:
        yield db_session


@pytest.fixture()
async def app(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[FastAPI]:
    application = create_app()

    async def _override_db_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as db_session:
            yield db_session

    application.dependency_overrides[get_db_session] = _override_db_session
    try:
        yield application
    finally:
        application.dependency_overrides.clear()


@pytest.fixture()
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest.fixture()
def authenticated_user(
    session: AsyncSession,
    client: AsyncClient,
) -> Callable[..., Awaitable[AuthenticatedUser]]:
    """Create a user directly through the service layer and log in over HTTP."""

    user_service = UserService(session)
    counter = count()

    async def _factory(
        *,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        first_name: str = "Test",
        last_name: str = "User",
        role: UserRole = UserRole.USER,
        login: bool = True,
    ) -> AuthenticatedUser:
        actual_email = email or f"user-{next(counter)}@example.com"
        user = await user_service.create_user(
            email=actual_email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        access_token: str | None = None
        if login:
            response = await client.post(
                "/api/v1/auth/login",
                json={"email": actual_email, "password": password},
            )
            assert response.status_code == 200, response.text
            access_token = response.json()["accessToken"]
        return AuthenticatedUser(
            user=user,
            email=actual_email,
            password=password,
            access_token=access_token,
        )

    return _factory
