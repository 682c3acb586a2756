"""Pydantic schemas for clients, interactions and documents."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.crm.properties.schemas import SharedPropertyRead
from src.crm.requirements.schemas import RequirementCreate, RequirementRead
from src.crm.schemas.common import ChecklistItemRead, ORMModel

# ── Interaction Schemas ─────────────────────────────────────────────────────


class InteractionCreate(BaseModel):
    """Schema for logging an interaction by hand (call, meeting, note...)."""

    type: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    notes: str | None = None
    date: datetime | None = None


class InteractionRead(ORMModel):
    id: uuid.UUID
    client_id: uuid.UUID
    type: str
    description: str
    notes: str | None = None
    date: datetime
    stage_id: uuid.UUID | None = None
    request_id: uuid.UUID | None = None
    requirement_id: uuid.UUID | None = None


# ── Document Schemas ────────────────────────────────────────────────────────


class DocumentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=300)
    url: str = Field(..., min_length=1, max_length=1000)
    type: str | None = None


class DocumentsCreate(BaseModel):
    """Attach one or more already-uploaded files to a client."""

    documents: list[DocumentCreate] = Field(..., min_length=1)
    stage_id: uuid.UUID | None = None


class DocumentRead(ORMModel):
    id: uuid.UUID
    client_id: uuid.UUID
    stage_id: uuid.UUID | None = None
    name: str
    url: str
    type: str | None = None
    created_at: datetime


# ── Client Schemas ──────────────────────────────────────────────────────────


class ClientValidate(BaseModel):
    """Duplicate check input."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None


class ClientCreate(BaseModel):
    """Schema for creating a client.

    Unless ``force_create`` is set, a client with the same name or email
    (case-insensitive) or the same phone is rejected with 409.
    """

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    status: str = "Active"
    notes: str | None = None
    requirements: RequirementCreate | None = None
    force_create: bool = False


class ClientUpdate(BaseModel):
    """Partial update; a status change is recorded in the activity log."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    status: str | None = None
    notes: str | None = None
    pinned: bool | None = None

    @field_validator("name", "status", "pinned")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ClientMatch(ORMModel):
    id: uuid.UUID
    name: str
    email: str | None = None
    phone: str | None = None


class DuplicateCheckResponse(BaseModel):
    exists: bool
    matches: list[ClientMatch] = Field(default_factory=list)
    message: str | None = None


class ClientRead(ORMModel):
    id: uuid.UUID
    name: str
    email: str | None = None
    phone: str | None = None
    status: str
    notes: str | None = None
    pinned: bool
    last_contact: datetime
    created_at: datetime
    updated_at: datetime


class ClientSummary(ClientRead):
    """List view: requirements plus the most recent interaction."""

    requirements: list[RequirementRead] = Field(default_factory=list)
    latest_interaction: InteractionRead | None = None


class ClientDetail(ClientRead):
    requirements: list[RequirementRead] = Field(default_factory=list)
    interactions: list[InteractionRead] = Field(default_factory=list)
    shared_properties: list[SharedPropertyRead] = Field(default_factory=list)
    documents: list[DocumentRead] = Field(default_factory=list)
    checklist: list[ChecklistItemRead] = Field(default_factory=list)
