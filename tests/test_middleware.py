"""Middleware and error envelope tests.

Covers the per-IP rate limiter, request IDs, the Prometheus endpoint and
the ``{"error": ...}`` shape of every failure path.
"""

from __future__ import annotations

import uuid

from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError

from src.crm.api.middleware.ratelimit import RateLimitMiddleware
from src.crm.config import get_settings
from src.crm.core.errors import ConflictError
from src.crm.main import create_app


async def _limited_client(monkeypatch, max_requests: int) -> AsyncClient:
    monkeypatch.setenv("RATE_LIMIT_REQUESTS", str(max_requests))
    get_settings.cache_clear()
    limited_app = create_app()
    return AsyncClient(transport=ASGITransport(app=limited_app), base_url="http://test")


# ── Rate Limiting ────────────────────────────────────────────────────────────


async def test_rate_limit_rejects_after_max_requests(app, monkeypatch):
    async with await _limited_client(monkeypatch, 3) as ac:
        for _ in range(3):
            response = await ac.get("/api/v1/auth/me")
            assert response.status_code == 401

        response = await ac.get("/api/v1/auth/me")
        assert response.status_code == 429
        assert response.json() == {"error": "Too many requests"}
        assert int(response.headers["Retry-After"]) >= 1


async def test_rate_limit_is_per_ip(app, monkeypatch):
    async with await _limited_client(monkeypatch, 1) as ac:
        first = await ac.get("/api/v1/auth/me", headers={"X-Forwarded-For": "10.0.0.1"})
        assert first.status_code == 401
        blocked = await ac.get("/api/v1/auth/me", headers={"X-Forwarded-For": "10.0.0.1"})
        assert blocked.status_code == 429

        other = await ac.get("/api/v1/auth/me", headers={"X-Forwarded-For": "10.0.0.2, 172.16.0.1"})
        assert other.status_code == 401


async def test_health_is_never_rate_limited(app, monkeypatch):
    async with await _limited_client(monkeypatch, 1) as ac:
        for _ in range(5):
            response = await ac.get("/health")
            assert response.status_code == 200


async def _noop_app(scope, receive, send):
    pass


def test_idle_ips_are_forgotten():
    limiter = RateLimitMiddleware(_noop_app, max_requests=5, window_seconds=1)
    start = 1000.0
    limiter._last_sweep = start
    for n in range(200):
        assert limiter.hit(f"10.1.{n // 256}.{n % 256}", start) is None
    assert limiter.tracked_ips == 200

    assert limiter.hit("10.9.9.9", start + 1.2) is None
    assert limiter.tracked_ips == 1


def test_window_reopens_after_expiry():
    limiter = RateLimitMiddleware(_noop_app, max_requests=2, window_seconds=10)
    limiter._last_sweep = 0.0
    assert limiter.hit("10.0.0.1", 0.0) is None
    assert limiter.hit("10.0.0.1", 1.0) is None
    assert limiter.hit("10.0.0.1", 2.0) == 9
    assert limiter.hit("10.0.0.1", 10.5) is None


# ── Logging & Metrics ────────────────────────────────────────────────────────


async def test_request_id_is_echoed(anon_client):
    response = await anon_client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


async def test_request_id_is_generated(anon_client):
    response = await anon_client.get("/health")
    assert uuid.UUID(response.headers["X-Request-ID"])


async def test_metrics_endpoint(anon_client):
    await anon_client.get("/health")
    response = await anon_client.get("/metrics")
    assert response.status_code == 200
    assert "crm_http_requests_total" in response.text


# ── Error Envelope ───────────────────────────────────────────────────────────


async def test_not_found_envelope(client):
    response = await client.get(f"/api/v1/clients/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"error": "Client not found"}


async def test_validation_error_envelope(client):
    response = await client.post("/api/v1/clients", json={"email": "not-an-email"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request"
    fields = {detail["loc"][-1] for detail in body["details"]}
    assert {"name", "email"} <= fields


async def test_malformed_uuid_is_a_bad_request(client):
    response = await client.get("/api/v1/clients/not-a-uuid")
    assert response.status_code == 400


async def test_domain_and_integrity_errors(app):
    @app.get("/conflict")
    async def conflict():
        raise ConflictError("Already there")

    @app.get("/integrity")
    async def integrity():
        raise IntegrityError("INSERT ...", {}, Exception("FOREIGN KEY constraint failed"))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/conflict")
        assert response.status_code == 409
        assert response.json() == {"error": "Already there"}

        response = await ac.get("/integrity")
        assert response.status_code == 409
        assert response.json() == {"error": "Conflicting or invalid reference"}


async def test_unhandled_error_envelope(app):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/boom")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
