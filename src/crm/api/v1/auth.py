"""Authentication endpoints: login, logout and current user.

Login issues a signed session token and stores it in an HTTP-only cookie.
The same token is returned in the body for API clients that prefer the
``Authorization: Bearer`` header.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.api.deps import get_current_user, get_db
from src.crm.config import get_settings
from src.crm.core.security import create_session_token, verify_password
from src.crm.models import User
from src.crm.schemas.auth import LoginRequest, SessionResponse, UserResponse
from src.crm.schemas.common import SuccessResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(id=str(user.id), email=user.email, name=user.name, role=user.role)


@router.post("/login", response_model=SessionResponse)
async def login(body: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    """Authenticate with email and password and start a cookie session."""
    result = await db.execute(
        select(User).where(
            func.lower(User.email) == body.email.lower(),
            User.is_active == True,  # noqa: E712
        )
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(body.password, user.hashed_password):
        logger.info("login_failed", email=body.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    settings = get_settings()
    token = create_session_token({"sub": str(user.id), "email": user.email, "role": user.role})
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )
    logger.info("login_succeeded", user_id=str(user.id))
    return SessionResponse(user=_user_response(user), access_token=token)


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response):
    """Clear the session cookie."""
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME)
    return SuccessResponse()


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Return the signed-in user."""
    return _user_response(current_user)
