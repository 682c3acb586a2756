"""API middleware package."""

from src.crm.api.middleware.logging import LoggingMiddleware
from src.crm.api.middleware.ratelimit import RateLimitMiddleware

__all__ = ["LoggingMiddleware", "RateLimitMiddleware"]
