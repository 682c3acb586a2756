"""Test fixtures for the CRM API.

Provides:
- FastAPI test app backed by a fresh in-memory SQLite database per test
- An agent user and an authenticated async HTTP client (session cookie)
- Small factories for the rows most tests start from
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.config import get_settings
from src.crm.core.database import close_db, get_engine, init_db
from src.crm.core.security import hash_password
from src.crm.main import create_app
from src.crm.models import User

AGENT_EMAIL = "agent@example.com"
AGENT_PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def app(monkeypatch):
    """Create the FastAPI app on an empty in-memory database."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite://")
    monkeypatch.setenv("RATE_LIMIT_REQUESTS", "10000")
    monkeypatch.setenv("SENTRY_DSN", "")
    get_settings.cache_clear()
    await close_db()
    await init_db()

    yield create_app()

    await close_db()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def db_session(app) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for arranging and inspecting rows."""
    async with AsyncSession(get_engine(), expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture
async def agent(db_session) -> User:
    user = User(
        email=AGENT_EMAIL,
        name="Test Agent",
        role="agent",
        is_active=True,
        hashed_password=hash_password(AGENT_PASSWORD),
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
def credentials() -> dict:
    return {"email": AGENT_EMAIL, "password": AGENT_PASSWORD}


@pytest_asyncio.fixture
async def anon_client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client without a session."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def client(app, agent) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client signed in as the test agent."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post(
            "/api/v1/auth/login",
            json={"email": AGENT_EMAIL, "password": AGENT_PASSWORD},
        )
        assert response.status_code == 200, response.text
        yield ac


# ── Factories ─────────────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def make_client(client):
    """Create a client through the API and return its JSON."""

    async def _make(name: str = "Maria Lopez", email: str | None = "maria@example.com", **extra) -> dict:
        payload = {"name": name, "email": email, "force_create": True, **extra}
        response = await client.post("/api/v1/clients", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest_asyncio.fixture
async def make_property(client):
    """Create a property through the API and return its JSON."""

    async def _make(**overrides) -> dict:
        payload = {
            "title": "Sunny 3BR Colonial",
            "address": "12 Elm Street, Springfield",
            "price": 450000,
            "type": "House",
            "listing_type": "SALE",
            "bedrooms": 3,
            "bathrooms": 2,
            "area": 1850,
            **overrides,
        }
        response = await client.post("/api/v1/properties", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
