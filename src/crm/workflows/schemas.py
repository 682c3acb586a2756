"""Pydantic schemas for requests, stages, processes and client actions."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.crm.clients.schemas import DocumentRead
from src.crm.notifications.schemas import DocumentRequestRead, MeetingRead
from src.crm.requirements.schemas import RequirementRead
from src.crm.schemas.common import ChecklistItemRead, ORMModel
from src.crm.workflows.models import ProcessType, TaskType, WorkStatus


class RequestType(str, Enum):
    PURCHASE = "PURCHASE"
    RENTAL = "RENTAL"
    SALE = "SALE"


# ── Tasks ───────────────────────────────────────────────────────────────────


class AutomatedTaskIn(BaseModel):
    type: TaskType


class TaskCreate(BaseModel):
    type: TaskType


class TaskUpdate(BaseModel):
    status: WorkStatus
    notes: str | None = None


class ProcessTaskRead(ORMModel):
    id: uuid.UUID
    process_id: uuid.UUID
    type: str
    status: str
    notes: str | None = None
    completed_at: datetime | None = None
    created_at: datetime


class ActionTaskRead(ORMModel):
    id: uuid.UUID
    action_id: uuid.UUID
    type: str
    status: str
    created_at: datetime


# ── Processes ───────────────────────────────────────────────────────────────


class ProcessCreate(BaseModel):
    """A stage or request process; ``automated_tasks`` fan out on creation."""

    title: str = Field(..., min_length=1, max_length=300)
    description: str = ""
    type: ProcessType = ProcessType.TASK
    due_date: datetime | None = None
    automated_tasks: list[AutomatedTaskIn] = Field(default_factory=list)


class ProcessUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = None
    status: WorkStatus | None = None
    due_date: datetime | None = None
    notes: str | None = None


class ProcessStatusUpdate(BaseModel):
    status: WorkStatus
    notes: str | None = None


class ProcessRead(ORMModel):
    id: uuid.UUID
    stage_id: uuid.UUID | None = None
    request_id: uuid.UUID | None = None
    title: str
    description: str
    type: str
    status: str
    due_date: datetime | None = None
    completed_at: datetime | None = None
    notes: str | None = None
    created_at: datetime
    tasks: list[ProcessTaskRead] = Field(default_factory=list)


# ── Requests ────────────────────────────────────────────────────────────────


class RequestCreate(BaseModel):
    type: RequestType


class RequestUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=50)


class RequestRead(ORMModel):
    id: uuid.UUID
    client_id: uuid.UUID
    type: str
    status: str
    created_at: datetime
    updated_at: datetime
    processes: list[ProcessRead] = Field(default_factory=list)
    requirements: list[RequirementRead] = Field(default_factory=list)
    checklist: list[ChecklistItemRead] = Field(default_factory=list)


# ── Stages ──────────────────────────────────────────────────────────────────


class StageCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: str | None = None
    processes: list[ProcessCreate] = Field(default_factory=list)


class StageUpdate(BaseModel):
    """Partial update; COMPLETED stamps end_date, any other status clears it."""

    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = None
    status: str | None = None
    order: int | None = Field(default=None, ge=0)


class StageRead(ORMModel):
    id: uuid.UUID
    client_id: uuid.UUID
    title: str
    description: str | None = None
    order: int
    status: str
    start_date: datetime
    end_date: datetime | None = None
    created_at: datetime
    processes: list[ProcessRead] = Field(default_factory=list)
    requirements: list[RequirementRead] = Field(default_factory=list)
    checklist: list[ChecklistItemRead] = Field(default_factory=list)
    documents: list[DocumentRead] = Field(default_factory=list)


# ── Client Actions ──────────────────────────────────────────────────────────


class ActionCreate(BaseModel):
    """An onboarding or process action attached to a client."""

    title: str = Field(..., min_length=1, max_length=300)
    description: str = ""
    type: ProcessType = ProcessType.TASK
    due_date: datetime | None = None
    automated_tasks: list[AutomatedTaskIn] = Field(default_factory=list)


class OnboardingStart(BaseModel):
    actions: list[ActionCreate] = Field(..., min_length=1)


class ActionStatusUpdate(BaseModel):
    status: WorkStatus
    notes: str | None = None


class OnboardingStatusUpdate(ActionStatusUpdate):
    action_id: uuid.UUID


class ClientActionRead(ORMModel):
    id: uuid.UUID
    client_id: uuid.UUID
    category: str
    title: str
    description: str
    type: str
    status: str
    due_date: datetime | None = None
    completed_at: datetime | None = None
    notes: str | None = None
    created_at: datetime
    tasks: list[ActionTaskRead] = Field(default_factory=list)


class OnboardingProgress(BaseModel):
    total: int
    completed: int


class OnboardingOverview(BaseModel):
    actions: list[ClientActionRead]
    document_requests: list[DocumentRequestRead]
    meetings: list[MeetingRead]
    progress: OnboardingProgress
