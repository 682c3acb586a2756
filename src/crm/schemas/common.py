"""Pydantic schemas shared across the domain modules."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ORMModel(BaseModel):
    """Base for read schemas populated from SQLAlchemy rows."""

    model_config = ConfigDict(from_attributes=True)


class SuccessResponse(BaseModel):
    """Acknowledgement for deletes and other body-less operations."""

    success: bool = True


# ── Checklist Schemas ───────────────────────────────────────────────────────


class ChecklistItemCreate(BaseModel):
    """Schema for adding a checklist item."""

    text: str = Field(..., min_length=1, max_length=2000)


class ChecklistItemUpdate(BaseModel):
    """Schema for editing or ticking a checklist item."""

    text: str | None = Field(default=None, min_length=1, max_length=2000)
    completed: bool | None = None


class ChecklistItemRead(ORMModel):
    """Schema for reading a checklist item."""

    id: uuid.UUID
    text: str
    completed: bool
    client_id: uuid.UUID | None = None
    stage_id: uuid.UUID | None = None
    request_id: uuid.UUID | None = None
    requirement_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime
