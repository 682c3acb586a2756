"""FastAPI dependency injection for database sessions and authentication.

These dependencies are used in endpoint function signatures (or as
router-level ``dependencies``) to inject the request-scoped database
session, the authenticated user and commonly loaded parent rows.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.clients.models import Client
from src.crm.core.database import get_session
from src.crm.core.errors import NotFoundError
from src.crm.core.security import extract_session_token, verify_token
from src.crm.models import User
from src.crm.requirements.models import Requirement


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a request-scoped database session."""
    async for session in get_session():
        yield session


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the signed-in user from the session cookie or a Bearer token.

    Raises:
        HTTPException(401): If no valid session is presented or the user is inactive.
    """
    token = extract_session_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(token)
    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    result = await db.execute(
        select(User).where(
            User.id == user_id,
            User.is_active == True,  # noqa: E712
        )
    )
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )
    return user


# Alias for router-level dependencies
require_auth = Depends(get_current_user)


# ── Parent Row Loaders ───────────────────────────────────────────────────────


async def get_client_or_404(client_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> Client:
    """Load the ``{client_id}`` path parameter's client or raise 404."""
    client = await db.get(Client, client_id)
    if client is None:
        raise NotFoundError("Client")
    return client


async def get_requirement_or_404(
    requirement_id: uuid.UUID, db: AsyncSession = Depends(get_db)
) -> Requirement:
    """Load the ``{requirement_id}`` path parameter's requirement or raise 404."""
    requirement = await db.get(Requirement, requirement_id)
    if requirement is None:
        raise NotFoundError("Requirement")
    return requirement
