"""Notification side-effect tables written by the workflow fan-out.

- EmailQueue: outbound email waiting for a delivery worker
- DocumentRequest: a document the client has been asked to provide
- Meeting: a meeting suggested to the client
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.crm.core.database import Base, IdMixin, TimestampMixin


class EmailQueue(IdMixin, TimestampMixin, Base):
    """An email waiting to be delivered."""

    __tablename__ = "email_queue"

    to: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="PENDING", index=True)
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )
    lead_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("leads.id", ondelete="SET NULL"), nullable=True
    )
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class DocumentRequest(IdMixin, TimestampMixin, Base):
    """A document requested from a client."""

    __tablename__ = "document_requests"

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(String(20), default="PENDING")
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Meeting(IdMixin, TimestampMixin, Base):
    """A meeting suggested to a client."""

    __tablename__ = "meetings"

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(String(20), default="PENDING")
    suggested_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
