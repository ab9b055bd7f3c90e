"""Shared test fixtures."""

# ruff: noqa: E402  -- environment must be prepared before settings import

import os

# Settings require a JWT secret at import time.
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-prod")

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from config.settings import settings
from src.main import app


def make_access_token(user_id: str, expires_in: timedelta = timedelta(minutes=30)) -> str:
    now = datetime.now(UTC)
    payload = {"sub": user_id, "type": "access", "iat": now, "exp": now + expires_in}
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM))


@pytest.fixture
def access_token_factory():  # type: ignore[no-untyped-def]
    return make_access_token


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
