"""Pytest configuration and shared fixtures."""

import os
from collections.abc import AsyncGenerator, Iterator
from unittest.mock import MagicMock

import fakeredis
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

# Set test environment variables before any imports from continuum
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("JWT_SECRET", "test-admin-secret")
os.environ.setdefault("CLIENT_JWT_SECRET", "test-client-secret")
os.environ.setdefault("RESEND_API_KEY", "re_test_key")
os.environ.setdefault("APP_ENV", "test")

ADMIN_EMAIL = "admin@thecontinuumclinic.com"
ADMIN_PASSWORD = "correct-horse-battery"
CLIENT_PASSWORD = "portal-pass-123"


@pytest.fixture(autouse=True)
def reset_settings_cache() -> None:
    """Reset settings cache before each test."""
    from continuum.core.config import get_settings

    get_settings.cache_clear()


@pytest.fixture
def redis_client() -> Iterator[fakeredis.FakeRedis]:
    """Isolated in-memory Redis returning ``str`` values."""
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    client.flushall()


@pytest.fixture
def mock_email_service() -> MagicMock:
    """Email service whose send methods are AsyncMocks."""
    from continuum.services.email_service import EmailService

    service = MagicMock(spec=EmailService)
    service.send_email.return_value = "msg-test"
    return service


@pytest.fixture
def app(
    redis_client: fakeredis.FakeRedis,
    mock_email_service: MagicMock,
    monkeypatch: pytest.MonkeyPatch,
) -> FastAPI:
    """Full application wired to fakeredis and the mocked email service."""
    from continuum.api.dependencies import get_email_service
    from continuum.core import redis as redis_module
    from continuum.core.redis import get_redis
    from continuum.main import create_app

    # middleware reads the shared client directly
    monkeypatch.setattr(redis_module, "_client", redis_client)

    test_app = create_app()
    test_app.dependency_overrides[get_redis] = lambda: redis_client
    test_app.dependency_overrides[get_email_service] = lambda: mock_email_service
    return test_app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the application."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def admin_headers(redis_client: fakeredis.FakeRedis) -> dict[str, str]:
    """Cookie header of a live admin session."""
    from continuum.services.auth_service import AuthService

    auth = AuthService(redis_client)
    await auth.create_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
    result = await auth.login_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
    return {"Cookie": f"admin-token={result.token}"}


@pytest.fixture
async def portal_client(redis_client: fakeredis.FakeRedis):  # type: ignore[no-untyped-def]
    """A verified client account with a password."""
    from continuum.models.client import ClientCreate
    from continuum.services.client_service import ClientService

    return await ClientService(redis_client).create_client(
        ClientCreate(
            email="jane.owner@example.com",
            first_name="Jane",
            last_name="Owner",
            phone="+44 20 7946 0000",
            password=CLIENT_PASSWORD,
        )
    )


@pytest.fixture
async def client_headers(redis_client: fakeredis.FakeRedis, portal_client) -> dict[str, str]:  # type: ignore[no-untyped-def]
    """Cookie header of a live portal session for ``portal_client``."""
    from continuum.services.auth_service import AuthService

    result = await AuthService(redis_client).login_client(portal_client.email, CLIENT_PASSWORD)
    return {"Cookie": f"client-token={result.token}"}
