"""Client persistence models -- the people the agent works for.

Four SQLAlchemy models:
- Client: contact record, status, pin flag, last contact time
- Interaction: activity log entry; every workflow mutation writes one
- Document: file reference (URL) attached to a client or a stage
- ChecklistItem: to-do item owned by exactly one client, stage, request or requirement

Child rows reference their parent with ON DELETE CASCADE, so deleting a
client removes its whole subtree in the database. Interaction links to
stages, requests and requirements are SET NULL so the activity log
outlives the things it describes.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.crm.core.database import Base, IdMixin, TimestampMixin, utcnow

if TYPE_CHECKING:
    from src.crm.properties.models import SharedProperty
    from src.crm.requirements.models import Requirement


class Client(IdMixin, TimestampMixin, Base):
    """A buyer, seller or renter the agent represents."""

    __tablename__ = "clients"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(50), default="Active")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    pinned: Mapped[bool] = mapped_column(Boolean, default=False)
    last_contact: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    requirements: Mapped[list[Requirement]] = relationship(
        back_populates="client",
        passive_deletes=True,
        order_by="Requirement.created_at",
    )
    interactions: Mapped[list[Interaction]] = relationship(
        back_populates="client",
        passive_deletes=True,
        order_by="Interaction.date.desc()",
    )
    documents: Mapped[list[Document]] = relationship(
        passive_deletes=True,
        order_by="Document.created_at.desc()",
    )
    checklist: Mapped[list[ChecklistItem]] = relationship(
        primaryjoin="ChecklistItem.client_id == Client.id",
        order_by="ChecklistItem.created_at",
        viewonly=True,
    )
    shared_properties: Mapped[list[SharedProperty]] = relationship(
        back_populates="client",
        passive_deletes=True,
        order_by="SharedProperty.shared_date.desc()",
    )


class Interaction(IdMixin, TimestampMixin, Base):
    """Activity log entry for a client."""

    __tablename__ = "interactions"

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    stage_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("stages.id", ondelete="SET NULL"), nullable=True
    )
    request_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("requests.id", ondelete="SET NULL"), nullable=True
    )
    requirement_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("requirements.id", ondelete="SET NULL"), nullable=True
    )

    client: Mapped[Client] = relationship(back_populates="interactions")


class Document(IdMixin, TimestampMixin, Base):
    """A file stored elsewhere, referenced by URL."""

    __tablename__ = "documents"

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    stage_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("stages.id", ondelete="CASCADE"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    type: Mapped[str | None] = mapped_column(String(100), nullable=True)


class ChecklistItem(IdMixin, TimestampMixin, Base):
    """A to-do item. Exactly one owner column is set."""

    __tablename__ = "checklist_items"
    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN client_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN stage_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN request_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN requirement_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_checklist_items_single_owner",
        ),
    )

    text: Mapped[str] = mapped_column(Text, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=True, index=True
    )
    stage_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("stages.id", ondelete="CASCADE"), nullable=True, index=True
    )
    request_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("requests.id", ondelete="CASCADE"), nullable=True, index=True
    )
    requirement_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("requirements.id", ondelete="CASCADE"), nullable=True, index=True
    )
