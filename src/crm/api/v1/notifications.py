"""REST API endpoints for queued notifications.

Emails, document requests and meeting suggestions are written by the
workflow fan-out. These endpoints let an operator (or a delivery worker)
inspect the queues and record delivery status.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.api.deps import get_db, require_auth
from src.crm.core.errors import NotFoundError
from src.crm.notifications.repository import NotificationRepository
from src.crm.notifications.schemas import (
    DocumentRequestRead,
    EmailRead,
    EmailStatus,
    EmailStatusUpdate,
    MeetingRead,
    NotificationStatusUpdate,
)

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"], dependencies=[require_auth])


@router.get("/emails", response_model=list[EmailRead])
async def list_emails(
    status: EmailStatus | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    return await NotificationRepository(db).list_emails(status.value if status else None, limit)


@router.patch("/emails/{email_id}", response_model=EmailRead)
async def update_email_status(
    email_id: uuid.UUID,
    body: EmailStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    email = await NotificationRepository(db).update_email_status(email_id, body.status.value)
    if email is None:
        raise NotFoundError("Email")
    return email


@router.get("/document-requests", response_model=list[DocumentRequestRead])
async def list_document_requests(client_id: uuid.UUID | None = None, db: AsyncSession = Depends(get_db)):
    return await NotificationRepository(db).list_document_requests(client_id)


@router.patch("/document-requests/{request_id}", response_model=DocumentRequestRead)
async def update_document_request(
    request_id: uuid.UUID,
    body: NotificationStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    doc_request = await NotificationRepository(db).update_document_request(request_id, body.status)
    if doc_request is None:
        raise NotFoundError("Document request")
    return doc_request


@router.get("/meetings", response_model=list[MeetingRead])
async def list_meetings(client_id: uuid.UUID | None = None, db: AsyncSession = Depends(get_db)):
    return await NotificationRepository(db).list_meetings(client_id)


@router.patch("/meetings/{meeting_id}", response_model=MeetingRead)
async def update_meeting(
    meeting_id: uuid.UUID,
    body: NotificationStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    meeting = await NotificationRepository(db).update_meeting(meeting_id, body.status)
    if meeting is None:
        raise NotFoundError("Meeting")
    return meeting
