"""Pydantic schemas for leads and lead communication."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from src.crm.clients.schemas import ClientRead
from src.crm.leads.models import LeadStatus
from src.crm.schemas.common import ORMModel


class LeadCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(default="", max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    source: str | None = Field(default=None, max_length=100)
    notes: str | None = None


class LeadUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    source: str | None = Field(default=None, max_length=100)
    status: LeadStatus | None = None
    notes: str | None = None


class LeadRead(ORMModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    source: str | None = None
    status: str
    notes: str | None = None
    last_contact: datetime | None = None
    emails_sent: int
    converted_at: datetime | None = None
    converted_client_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime


class LeadInteractionCreate(BaseModel):
    """A call, note or meeting recorded against a lead."""

    type: str = Field(..., min_length=1, max_length=50)
    content: str = Field(..., min_length=1)


class LeadInteractionRead(ORMModel):
    id: uuid.UUID
    lead_id: uuid.UUID
    type: str
    content: str
    date: datetime


class LeadEmail(BaseModel):
    subject: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)


class LeadEmailResult(BaseModel):
    success: bool = True
    email_id: uuid.UUID
    interaction: LeadInteractionRead


class LeadConversion(BaseModel):
    success: bool = True
    client: ClientRead
    lead: LeadRead
