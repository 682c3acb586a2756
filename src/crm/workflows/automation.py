"""Automated task fan-out for new actions and processes.

Each automated task type writes one side-effect row in the caller's
session:

    EMAIL             -> email_queue row to the client (skipped without an address)
    DOCUMENT_REQUEST  -> document_requests row due in 7 days
    CALENDAR_INVITE   -> meetings row suggested 3 days out

Nothing is committed here; the caller's transaction covers the parent
row, its tasks and every side effect.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

import structlog
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.clients.models import Client
from src.crm.notifications.models import DocumentRequest, Meeting
from src.crm.notifications.repository import compose_letter, queue_email
from src.crm.workflows.models import TaskType

logger = structlog.get_logger(__name__)

DOCUMENT_REQUEST_DUE = timedelta(days=7)
MEETING_LEAD_TIME = timedelta(days=3)


class FanOutResult(BaseModel):
    """Counts of side-effect rows written by one fan-out."""

    emails: int = 0
    document_requests: int = 0
    meetings: int = 0


def fan_out(
    session: AsyncSession,
    client: Client,
    *,
    title: str,
    description: str,
    task_types: Iterable[TaskType | str],
    email_subject: str,
    source: str = "workflow",
) -> FanOutResult:
    """Write the side effects of ``task_types`` for ``client``."""
    result = FanOutResult()
    now = datetime.now(timezone.utc)

    for task_type in task_types:
        task_type = TaskType(task_type)
        if task_type == TaskType.EMAIL:
            if not client.email:
                logger.info("fan_out_email_skipped", client_id=str(client.id), reason="no_email")
                continue
            queue_email(
                session,
                to=client.email,
                subject=email_subject,
                content=compose_letter(client.name, description),
                client_id=client.id,
                source=source,
            )
            result.emails += 1
        elif task_type == TaskType.DOCUMENT_REQUEST:
            session.add(
                DocumentRequest(
                    client_id=client.id,
                    title=title,
                    description=description,
                    status="PENDING",
                    due_date=now + DOCUMENT_REQUEST_DUE,
                )
            )
            result.document_requests += 1
        elif task_type == TaskType.CALENDAR_INVITE:
            session.add(
                Meeting(
                    client_id=client.id,
                    title=title,
                    description=description,
                    status="PENDING",
                    suggested_date=now + MEETING_LEAD_TIME,
                )
            )
            result.meetings += 1

    return result


def queue_completion_email(session: AsyncSession, client: Client, title: str, source: str = "workflow") -> bool:
    """Tell the client a task was completed; False when the client has no email."""
    if not client.email:
        return False
    queue_email(
        session,
        to=client.email,
        subject=f"{title} Completed",
        content=compose_letter(client.name, f'The task "{title}" has been completed.'),
        client_id=client.id,
        source=source,
    )
    return True
