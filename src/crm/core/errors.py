"""Domain exceptions and the uniform JSON error envelope.

Every error leaves the API as ``{"error": "<message>"}`` with the matching
status code. Handlers are registered on the app in ``create_app()``.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

logger = structlog.get_logger(__name__)


class CRMError(Exception):
    """Base class for errors raised by repositories and services."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(CRMError):
    """A referenced row does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, message: str | None = None) -> None:
        super().__init__(message or f"{entity} not found")


class ConflictError(CRMError):
    """The write would duplicate or contradict existing data."""

    status_code = status.HTTP_409_CONFLICT


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    """Build the JSON error envelope."""
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


# ── Exception Handlers ───────────────────────────────────────────────────────


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", details=details)


async def crm_error_handler(request: Request, exc: CRMError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(
        "integrity_error",
        method=request.method,
        path=request.url.path,
        error=str(exc.orig),
    )
    return error_response(status.HTTP_409_CONFLICT, "Conflicting or invalid reference")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        method=request.method,
        path=request.url.path,
        exc_info=exc,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error envelope handlers to the app."""
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(CRMError, crm_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
