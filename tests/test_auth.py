"""Authentication tests.

Tests cookie login, Bearer access, logout, token validation and the
unauthenticated health probes.
"""

from __future__ import annotations

from datetime import timedelta

from jose import jwt

from src.crm.config import get_settings
from src.crm.core.security import create_session_token, hash_password, verify_password
from src.crm.models import User


# ── Password Hashing ──────────────────────────────────────────────────────────


def test_password_hash_roundtrip():
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)


# ── Login Tests ───────────────────────────────────────────────────────────────


async def test_login_sets_session_cookie(anon_client, agent, credentials):
    """Login with valid credentials sets an HTTP-only session cookie."""
    response = await anon_client.post("/api/v1/auth/login", json=credentials)
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["user"]["email"] == credentials["email"]
    assert data["token_type"] == "bearer"

    settings = get_settings()
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"{settings.SESSION_COOKIE_NAME}=")
    assert "HttpOnly" in set_cookie

    payload = jwt.decode(data["access_token"], settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    assert payload["sub"] == str(agent.id)
    assert payload["type"] == "session"


async def test_login_email_is_case_insensitive(anon_client, agent, credentials):
    response = await anon_client.post(
        "/api/v1/auth/login",
        json={**credentials, "email": credentials["email"].upper()},
    )
    assert response.status_code == 200, response.text


async def test_login_invalid_credentials(anon_client, agent, credentials):
    """Login with wrong password returns 401 in the error envelope."""
    response = await anon_client.post(
        "/api/v1/auth/login",
        json={**credentials, "password": "wrong-password"},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


async def test_login_nonexistent_user(anon_client, agent):
    response = await anon_client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@example.com", "password": "any-password"},
    )
    assert response.status_code == 401


async def test_login_inactive_user(anon_client, db_session):
    db_session.add(
        User(
            email="retired@example.com",
            hashed_password=hash_password("old-password"),
            is_active=False,
        )
    )
    await db_session.commit()

    response = await anon_client.post(
        "/api/v1/auth/login",
        json={"email": "retired@example.com", "password": "old-password"},
    )
    assert response.status_code == 401


# ── Protected Endpoint Tests ─────────────────────────────────────────────────


async def test_me_with_cookie(client, agent):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 200, response.text
    assert response.json()["email"] == agent.email


async def test_me_with_bearer_token(anon_client, agent):
    token = create_session_token({"sub": str(agent.id), "email": agent.email})
    response = await anon_client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 200, response.text
    assert response.json()["id"] == str(agent.id)


async def test_protected_route_without_session(anon_client):
    response = await anon_client.get("/api/v1/clients")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


async def test_expired_token_rejected(anon_client, agent):
    token = create_session_token({"sub": str(agent.id)}, expires_delta=timedelta(seconds=-1))
    response = await anon_client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401


async def test_non_session_token_rejected(anon_client, agent):
    """A correctly signed token of another type is not a session."""
    settings = get_settings()
    token = jwt.encode(
        {"sub": str(agent.id), "type": "refresh"},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )
    response = await anon_client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401


async def test_token_signed_with_other_key_rejected(anon_client, agent):
    token = jwt.encode({"sub": str(agent.id), "type": "session"}, "not-the-key", algorithm="HS256")
    response = await anon_client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401


async def test_logout_clears_cookie(client):
    response = await client.post("/api/v1/auth/logout")
    assert response.status_code == 200
    assert response.json() == {"success": True}

    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401


# ── Health Probes ────────────────────────────────────────────────────────────


async def test_health_is_public(anon_client):
    response = await anon_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_readiness_checks_database(anon_client):
    response = await anon_client.get("/health/ready")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert body["checks"]["database"] == "ok"
