from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError

from taskboard.core.logging import RequestContextFilter
from taskboard.errors import ConflictError, NotFoundError, ServerError, ValidationError
from taskboard.main import create_app

ENVELOPE_KEYS = {"statusCode", "timestamp", "path", "method", "message", "error"}


@pytest.fixture()
def app(settings) -> FastAPI:
    return create_app()


@pytest.fixture()
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


async def test_application_error_envelope(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/application")
    async def trigger_application_error() -> None:  # pragma: no cover - defined in test
        raise NotFoundError("Example thing not found")

    response = await client.get("/error/application")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    payload = response.json()
    assert set(payload) == ENVELOPE_KEYS
    assert payload["statusCode"] == 404
    assert payload["path"] == "/error/application"
    assert payload["method"] == "GET"
    assert payload["message"] == "Example thing not found"
    assert payload["error"] == "not_found"
    assert response.headers["X-Request-ID"]


async def test_request_id_is_echoed(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/conflict")
    async def trigger_conflict() -> None:  # pragma: no cover - defined in test
        raise ConflictError()

    response = await client.get("/error/conflict", headers={"X-Request-ID": "req-123"})

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.headers["X-Request-ID"] == "req-123"
    assert response.json()["message"] == "Resource already exists."


async def test_raised_taxonomy_errors_use_their_codes(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/validation")
    async def trigger_validation_error() -> None:  # pragma: no cover - defined in test
        raise ValidationError("dueDate must be in the future")

    @app.get("/error/server")
    async def trigger_server_error() -> None:  # pragma: no cover - defined in test
        raise ServerError()

    invalid = await client.get("/error/validation")
    failed = await client.get("/error/server")

    assert invalid.status_code == status.HTTP_400_BAD_REQUEST
    assert invalid.json()["error"] == "bad_request"
    assert invalid.json()["message"] == "dueDate must be in the future"
    assert failed.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert failed.json()["error"] == "server_error"
    assert failed.json()["message"] == "Internal server error."


async def test_validation_error_is_bad_request(client: AsyncClient) -> None:
    response = await client.post("/api/v1/auth/login", json={"email": "not-an-email"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    payload = response.json()
    assert payload["error"] == "bad_request"
    assert payload["method"] == "POST"
    assert isinstance(payload["message"], list)
    assert any(message.startswith("email") for message in payload["message"])
    assert any(message.startswith("password") for message in payload["message"])


async def test_unknown_route_uses_envelope(client: AsyncClient) -> None:
    response = await client.get("/does-not-exist")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert set(response.json()) == ENVELOPE_KEYS
    assert response.json()["error"] == "not_found"


async def test_integrity_error_is_conflict(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/database")
    async def trigger_integrity_error() -> None:  # pragma: no cover - defined in test
        raise IntegrityError("statement", {}, Exception("constraint"))

    response = await client.get("/error/database")

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["message"] == "Database integrity violation."


async def test_unhandled_error_hides_internal_details(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/unhandled")
    async def trigger_unhandled_error() -> None:  # pragma: no cover - defined in test
        raise RuntimeError("Sensitive detail")

    response = await client.get("/error/unhandled")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    payload = response.json()
    assert payload["message"] == "Internal server error."
    assert payload["error"] == "server_error"
    assert "Sensitive" not in response.text


class _InMemoryHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.INFO)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


async def test_request_id_attached_to_logs(app: FastAPI, client: AsyncClient) -> None:
    logger = logging.getLogger("tests.error_handling")
    handler = _InMemoryHandler()
    handler.addFilter(RequestContextFilter())
    logger.addHandler(handler)
    original_level = logger.level
    logger.setLevel(logging.INFO)

    @app.get("/log")
    async def emit_log() -> dict[str, str]:  # pragma: no cover - defined in test
        logger.info("Log entry")
        return {"status": "ok"}

    try:
        response = await client.get("/log")
    finally:
        logger.removeHandler(handler)
        logger.setLevel(original_level)
        handler.close()

    request_id = response.headers["X-Request-ID"]
    matching = [record for record in handler.records if record.getMessage() == "Log entry"]
    assert matching
    assert getattr(matching[0], "request_id", None) == request_id


async def test_requests_are_logged_with_status_and_duration(client: AsyncClient) -> None:
    logger = logging.getLogger("taskboard.http")
    handler = _InMemoryHandler()
    logger.addHandler(handler)
    original_level = logger.level
    logger.setLevel(logging.INFO)

    try:
        response = await client.get("/healthz")
    finally:
        logger.removeHandler(handler)
        logger.setLevel(original_level)
        handler.close()

    assert response.status_code == 200
    messages = [record.getMessage() for record in handler.records]
    assert "Incoming request GET /healthz" in messages
    completed = [record for record in handler.records if record.getMessage().startswith("Completed")]
    assert completed
    assert getattr(completed[0], "status_code", None) == 200
    assert getattr(completed[0], "duration_ms", -1) >= 0
