"""Per-IP rate limiting middleware.

Sliding window kept in process memory: each client IP maps to the
timestamps of its recent requests, and IPs idle for a whole window are
forgotten. Requests beyond the configured limit inside the window get a
429 with a Retry-After header. State is per process and resets on
restart.
"""

from __future__ import annotations

import time
from collections import deque

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from src.crm.core.errors import error_response
from src.crm.core.monitoring import rate_limited_requests_total

logger = structlog.get_logger(__name__)

# Liveness probes and scrapes must never be throttled
EXEMPT_PATHS = frozenset({"/health", "/health/ready", "/metrics"})


def client_ip(request: Request) -> str:
    """Resolve the caller's IP: first X-Forwarded-For hop, X-Real-IP, then the peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject callers that exceed ``max_requests`` per ``window_seconds``."""

    def __init__(self, app: ASGIApp, max_requests: int = 100, window_seconds: int = 60) -> None:
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = time.monotonic()

    @property
    def tracked_ips(self) -> int:
        return len(self._hits)

    def _prune(self, hits: deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        """Forget every IP with no requests left inside the window."""
        for ip in list(self._hits):
            self._prune(self._hits[ip], now)
            if not self._hits[ip]:
                del self._hits[ip]
        self._last_sweep = now

    def hit(self, ip: str, now: float) -> int | None:
        """Record a request from ``ip``; return Retry-After seconds when over the limit."""
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)

        hits = self._hits.get(ip)
        if hits is not None:
            self._prune(hits, now)
        if hits and len(hits) >= self.max_requests:
            return max(1, int(hits[0] + self.window_seconds - now) + 1)

        self._hits.setdefault(ip, deque()).append(now)
        return None

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        ip = client_ip(request)
        retry_after = self.hit(ip, time.monotonic())
        if retry_after is not None:
            rate_limited_requests_total.inc()
            logger.warning("rate_limit_exceeded", client_ip=ip, path=request.url.path)
            response = error_response(429, "Too many requests")
            response.headers["Retry-After"] = str(retry_after)
            return response

        return await call_next(request)
