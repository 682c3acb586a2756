"""Pydantic schemas for authentication API endpoints."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Request schema for user login."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


class UserResponse(BaseModel):
    """Response schema for current user info."""

    id: str
    email: str
    name: str | None = None
    role: str


class SessionResponse(BaseModel):
    """Login result; the session itself travels in the cookie.

    ``access_token`` is returned for API clients that prefer a Bearer header.
    """

    user: UserResponse
    access_token: str
    token_type: str = "bearer"
