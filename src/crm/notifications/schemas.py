"""Pydantic schemas for queued emails, document requests and meetings."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from src.crm.schemas.common import ORMModel


class EmailStatus(str, Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class EmailRead(ORMModel):
    id: uuid.UUID
    to: str
    subject: str
    content: str
    status: str
    client_id: uuid.UUID | None = None
    lead_id: uuid.UUID | None = None
    sent_at: datetime | None = None
    created_at: datetime


class EmailStatusUpdate(BaseModel):
    status: EmailStatus


class DocumentRequestRead(ORMModel):
    id: uuid.UUID
    client_id: uuid.UUID
    title: str
    description: str
    status: str
    due_date: datetime
    created_at: datetime


class MeetingRead(ORMModel):
    id: uuid.UUID
    client_id: uuid.UUID
    title: str
    description: str
    status: str
    suggested_date: datetime
    created_at: datetime


class NotificationStatusUpdate(BaseModel):
    """Status change for a document request or meeting (free-form, e.g. RECEIVED, SCHEDULED)."""

    status: str
