"""Notification repository -- the outbound queue and client-facing requests.

``queue_email`` is the single write path into ``email_queue``; workflows,
requirement emails and lead emails all go through it. Rows are added to the
caller's session and committed with the caller's transaction; the
``crm_email_queue_total`` metric only counts emails whose transaction
committed.
"""

from __future__ import annotations

import uuid
from collections import Counter
from datetime import datetime, timezone

import structlog
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from src.crm.config import get_settings
from src.crm.core.monitoring import email_queue_total
from src.crm.notifications.models import DocumentRequest, EmailQueue, Meeting

logger = structlog.get_logger(__name__)

_PENDING_EMAILS = "crm_pending_emails"


@event.listens_for(Session, "after_commit")
def _count_committed_emails(session: Session) -> None:
    for source, count in session.info.pop(_PENDING_EMAILS, Counter()).items():
        email_queue_total.labels(source=source).inc(count)


@event.listens_for(Session, "after_soft_rollback")
def _discard_pending_emails(session: Session, previous_transaction) -> None:
    session.info.pop(_PENDING_EMAILS, None)


def compose_letter(recipient_name: str, body: str) -> str:
    """Wrap a message body in the standard greeting and signature."""
    signature = get_settings().AGENT_SIGNATURE
    return f"Dear {recipient_name},\n\n{body}\n\nBest regards,\n{signature}"


def queue_email(
    session: AsyncSession,
    *,
    to: str,
    subject: str,
    content: str,
    client_id: uuid.UUID | None = None,
    lead_id: uuid.UUID | None = None,
    source: str = "workflow",
) -> EmailQueue:
    """Add a PENDING email to the session (not committed)."""
    email = EmailQueue(
        to=to,
        subject=subject,
        content=content,
        status="PENDING",
        client_id=client_id,
        lead_id=lead_id,
    )
    session.add(email)
    session.info.setdefault(_PENDING_EMAILS, Counter())[source] += 1
    logger.info("email_queued", to=to, subject=subject, source=source)
    return email


class NotificationRepository:
    """Read and status-update access to queued notifications."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ── Email Queue ──────────────────────────────────────────────────────

    async def list_emails(self, status: str | None = None, limit: int = 100) -> list[EmailQueue]:
        stmt = select(EmailQueue).order_by(EmailQueue.created_at.desc()).limit(limit)
        if status:
            stmt = stmt.where(EmailQueue.status == status)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def update_email_status(self, email_id: uuid.UUID, status: str) -> EmailQueue | None:
        """Mark a queued email SENT/FAILED; SENT stamps sent_at."""
        email = await self._session.get(EmailQueue, email_id)
        if email is None:
            return None
        email.status = status
        if status == "SENT":
            email.sent_at = datetime.now(timezone.utc)
        await self._session.commit()
        return email

    # ── Document Requests ────────────────────────────────────────────────

    async def list_document_requests(self, client_id: uuid.UUID | None = None) -> list[DocumentRequest]:
        stmt = select(DocumentRequest).order_by(DocumentRequest.created_at.desc())
        if client_id:
            stmt = stmt.where(DocumentRequest.client_id == client_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def update_document_request(self, request_id: uuid.UUID, status: str) -> DocumentRequest | None:
        doc_request = await self._session.get(DocumentRequest, request_id)
        if doc_request is None:
            return None
        doc_request.status = status
        await self._session.commit()
        return doc_request

    # ── Meetings ─────────────────────────────────────────────────────────

    async def list_meetings(self, client_id: uuid.UUID | None = None) -> list[Meeting]:
        stmt = select(Meeting).order_by(Meeting.created_at.desc())
        if client_id:
            stmt = stmt.where(Meeting.client_id == client_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def update_meeting(self, meeting_id: uuid.UUID, status: str) -> Meeting | None:
        meeting = await self._session.get(Meeting, meeting_id)
        if meeting is None:
            return None
        meeting.status = status
        await self._session.commit()
        return meeting
