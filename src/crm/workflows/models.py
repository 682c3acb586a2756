"""Workflow persistence models -- requests, stages, processes and client actions.

- Request: a client's purchase/rental/sale engagement; seeded with default processes
- Stage: an ordered phase of the client journey (consultation, search, closing...)
- Process: a unit of work inside a stage or a request, with automated tasks
- ProcessTask: one automated side effect of a process (EMAIL, DOCUMENT_REQUEST, CALENDAR_INVITE)
- ClientAction: an onboarding or process action attached directly to a client
- ActionTask: automated side effect of a client action

Status values (PENDING / IN_PROGRESS / COMPLETED / FAILED) are set directly
by API callers; no transition rules are enforced.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.crm.core.database import Base, IdMixin, TimestampMixin, utcnow

if TYPE_CHECKING:
    from src.crm.clients.models import ChecklistItem, Client, Document
    from src.crm.requirements.models import Requirement


class WorkStatus(str, Enum):
    """Lifecycle of actions, processes and tasks."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ProcessType(str, Enum):
    DOCUMENT = "DOCUMENT"
    EMAIL = "EMAIL"
    MEETING = "MEETING"
    TASK = "TASK"


class TaskType(str, Enum):
    """Automated side effects fanned out when an action or process is created."""

    EMAIL = "EMAIL"
    DOCUMENT_REQUEST = "DOCUMENT_REQUEST"
    CALENDAR_INVITE = "CALENDAR_INVITE"


class ActionCategory(str, Enum):
    ONBOARDING = "onboarding"
    PROCESS = "process"


class Request(IdMixin, TimestampMixin, Base):
    """A purchase, rental or sale engagement for a client."""

    __tablename__ = "requests"

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="ACTIVE")

    processes: Mapped[list[Process]] = relationship(
        back_populates="request",
        passive_deletes=True,
        order_by="Process.created_at",
        lazy="selectin",
    )
    requirements: Mapped[list[Requirement]] = relationship(
        primaryjoin="Requirement.request_id == Request.id",
        order_by="Requirement.created_at.desc()",
        viewonly=True,
        lazy="selectin",
    )
    checklist: Mapped[list[ChecklistItem]] = relationship(
        primaryjoin="ChecklistItem.request_id == Request.id",
        order_by="ChecklistItem.created_at",
        viewonly=True,
        lazy="selectin",
    )


class Stage(IdMixin, TimestampMixin, Base):
    """An ordered phase of a client's journey."""

    __tablename__ = "stages"

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    order: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(50), default="ACTIVE")
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    client: Mapped[Client] = relationship()
    processes: Mapped[list[Process]] = relationship(
        back_populates="stage",
        passive_deletes=True,
        order_by="Process.created_at",
        lazy="selectin",
    )
    requirements: Mapped[list[Requirement]] = relationship(
        primaryjoin="Requirement.stage_id == Stage.id",
        order_by="Requirement.created_at",
        viewonly=True,
        lazy="selectin",
    )
    checklist: Mapped[list[ChecklistItem]] = relationship(
        primaryjoin="ChecklistItem.stage_id == Stage.id",
        order_by="ChecklistItem.created_at",
        viewonly=True,
        lazy="selectin",
    )
    documents: Mapped[list[Document]] = relationship(
        primaryjoin="Document.stage_id == Stage.id",
        order_by="Document.created_at.desc()",
        viewonly=True,
        lazy="selectin",
    )


class Process(IdMixin, TimestampMixin, Base):
    """A unit of work within a stage or a request."""

    __tablename__ = "processes"

    stage_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("stages.id", ondelete="CASCADE"), nullable=True, index=True
    )
    request_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("requests.id", ondelete="CASCADE"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    type: Mapped[str] = mapped_column(String(20), default=ProcessType.TASK.value)
    status: Mapped[str] = mapped_column(String(20), default=WorkStatus.PENDING.value)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    stage: Mapped[Stage | None] = relationship(back_populates="processes")
    request: Mapped[Request | None] = relationship(back_populates="processes")
    tasks: Mapped[list[ProcessTask]] = relationship(
        back_populates="process",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProcessTask.created_at",
        lazy="selectin",
    )


class ProcessTask(IdMixin, TimestampMixin, Base):
    """Automated task belonging to a process."""

    __tablename__ = "process_tasks"

    process_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("processes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=WorkStatus.PENDING.value)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    process: Mapped[Process] = relationship(back_populates="tasks")


class ClientAction(IdMixin, TimestampMixin, Base):
    """An onboarding or process action attached directly to a client."""

    __tablename__ = "client_actions"

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category: Mapped[str] = mapped_column(String(20), default=ActionCategory.ONBOARDING.value, index=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    type: Mapped[str] = mapped_column(String(20), default=ProcessType.TASK.value)
    status: Mapped[str] = mapped_column(String(20), default=WorkStatus.PENDING.value)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    client: Mapped[Client] = relationship()
    tasks: Mapped[list[ActionTask]] = relationship(
        back_populates="action",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ActionTask.created_at",
        lazy="selectin",
    )


class ActionTask(IdMixin, TimestampMixin, Base):
    """Automated task belonging to a client action."""

    __tablename__ = "action_tasks"

    action_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("client_actions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=WorkStatus.PENDING.value)

    action: Mapped[ClientAction] = relationship(back_populates="tasks")
