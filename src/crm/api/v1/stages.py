"""REST API endpoints for client stages.

A stage is an ordered phase of a client's journey. Each stage carries its
own processes (with automated tasks), requirements, documents and
checklist.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.api.deps import get_client_or_404, get_db, require_auth
from src.crm.clients.models import Client
from src.crm.clients.repository import ChecklistRepository
from src.crm.core.errors import NotFoundError
from src.crm.requirements.repository import RequirementRepository
from src.crm.requirements.schemas import RequirementCreate, RequirementRead
from src.crm.schemas.common import (
    ChecklistItemCreate,
    ChecklistItemRead,
    ChecklistItemUpdate,
    SuccessResponse,
)
from src.crm.workflows.models import Process, Stage
from src.crm.workflows.repository import StageRepository
from src.crm.workflows.schemas import (
    ProcessCreate,
    ProcessRead,
    ProcessStatusUpdate,
    ProcessTaskRead,
    StageCreate,
    StageRead,
    StageUpdate,
    TaskUpdate,
)
from src.crm.workflows.templates import STAGE_TEMPLATES, StageTemplate

router = APIRouter(prefix="/api/v1/clients", tags=["stages"], dependencies=[require_auth])


async def get_stage_or_404(
    stage_id: uuid.UUID,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
) -> Stage:
    stage = await StageRepository(db).get_stage(client.id, stage_id)
    if stage is None:
        raise NotFoundError("Stage")
    return stage


async def get_stage_process_or_404(
    process_id: uuid.UUID,
    stage: Stage = Depends(get_stage_or_404),
    db: AsyncSession = Depends(get_db),
) -> Process:
    process = await StageRepository(db).get_process(stage, process_id)
    if process is None:
        raise NotFoundError("Process")
    return process


# ── Stage Endpoints ──────────────────────────────────────────────────────────


@router.get("/stages/templates", response_model=list[StageTemplate])
async def list_stage_templates():
    """Built-in buyer journey stages."""
    return STAGE_TEMPLATES


@router.get("/{client_id}/stages", response_model=list[StageRead])
async def list_stages(
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await StageRepository(db).list_stages(client.id)


@router.post("/{client_id}/stages", response_model=StageRead, status_code=201)
async def create_stage(
    body: StageCreate,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Append a stage, with optional nested processes."""
    return await StageRepository(db).create_stage(client, body)


@router.patch("/{client_id}/stages/{stage_id}", response_model=StageRead)
async def update_stage(
    body: StageUpdate,
    client: Client = Depends(get_client_or_404),
    stage: Stage = Depends(get_stage_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await StageRepository(db).update_stage(client, stage, body)


@router.delete("/{client_id}/stages/{stage_id}", response_model=SuccessResponse)
async def delete_stage(stage: Stage = Depends(get_stage_or_404), db: AsyncSession = Depends(get_db)):
    await StageRepository(db).delete_stage(stage)
    return SuccessResponse()


# ── Stage Checklist Endpoints ────────────────────────────────────────────────


@router.get("/{client_id}/stages/{stage_id}/checklist", response_model=list[ChecklistItemRead])
async def list_stage_checklist(
    stage: Stage = Depends(get_stage_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await ChecklistRepository(db).list_items({"stage_id": stage.id})


@router.post("/{client_id}/stages/{stage_id}/checklist", response_model=ChecklistItemRead, status_code=201)
async def add_stage_checklist_item(
    body: ChecklistItemCreate,
    stage: Stage = Depends(get_stage_or_404),
    db: AsyncSession = Depends(get_db),
):
    repo = ChecklistRepository(db)
    item = await repo.add_item({"stage_id": stage.id}, body.text)
    await repo.commit()
    return item


@router.patch("/{client_id}/stages/{stage_id}/checklist/{item_id}", response_model=ChecklistItemRead)
async def update_stage_checklist_item(
    item_id: uuid.UUID,
    body: ChecklistItemUpdate,
    stage: Stage = Depends(get_stage_or_404),
    db: AsyncSession = Depends(get_db),
):
    item = await ChecklistRepository(db).update_item(
        {"stage_id": stage.id}, item_id, text=body.text, completed=body.completed
    )
    if item is None:
        raise NotFoundError("Checklist item")
    return item


@router.delete("/{client_id}/stages/{stage_id}/checklist/{item_id}", response_model=SuccessResponse)
async def delete_stage_checklist_item(
    item_id: uuid.UUID,
    stage: Stage = Depends(get_stage_or_404),
    db: AsyncSession = Depends(get_db),
):
    if not await ChecklistRepository(db).delete_item({"stage_id": stage.id}, item_id):
        raise NotFoundError("Checklist item")
    return SuccessResponse()


# ── Stage Process Endpoints ──────────────────────────────────────────────────


@router.post("/{client_id}/stages/{stage_id}/processes", response_model=ProcessRead, status_code=201)
async def add_stage_process(
    body: ProcessCreate,
    client: Client = Depends(get_client_or_404),
    stage: Stage = Depends(get_stage_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Add a process to a stage and trigger its automated tasks."""
    return await StageRepository(db).add_process(client, stage, body)


@router.delete("/{client_id}/stages/{stage_id}/processes/{process_id}", response_model=SuccessResponse)
async def delete_stage_process(
    process_id: uuid.UUID,
    stage: Stage = Depends(get_stage_or_404),
    db: AsyncSession = Depends(get_db),
):
    if not await StageRepository(db).delete_process(stage, process_id):
        raise NotFoundError("Process")
    return SuccessResponse()


@router.patch("/{client_id}/stages/{stage_id}/processes/{process_id}/status", response_model=ProcessRead)
async def update_stage_process_status(
    body: ProcessStatusUpdate,
    client: Client = Depends(get_client_or_404),
    stage: Stage = Depends(get_stage_or_404),
    process: Process = Depends(get_stage_process_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await StageRepository(db).update_process_status(client, stage, process, body.status, body.notes)


@router.patch(
    "/{client_id}/stages/{stage_id}/processes/{process_id}/tasks/{task_id}",
    response_model=ProcessTaskRead,
)
async def update_stage_process_task(
    task_id: uuid.UUID,
    body: TaskUpdate,
    client: Client = Depends(get_client_or_404),
    stage: Stage = Depends(get_stage_or_404),
    process: Process = Depends(get_stage_process_or_404),
    db: AsyncSession = Depends(get_db),
):
    task = await StageRepository(db).update_process_task(
        client, stage, process, task_id, body.status, body.notes
    )
    if task is None:
        raise NotFoundError("Task")
    return task


# ── Stage Requirement Endpoints ──────────────────────────────────────────────


@router.get("/{client_id}/stages/{stage_id}/requirements", response_model=list[RequirementRead])
async def list_stage_requirements(
    stage: Stage = Depends(get_stage_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequirementRepository(db).list_requirements(stage_id=stage.id)


@router.post("/{client_id}/stages/{stage_id}/requirements", response_model=RequirementRead, status_code=201)
async def create_stage_requirement(
    body: RequirementCreate,
    client: Client = Depends(get_client_or_404),
    stage: Stage = Depends(get_stage_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequirementRepository(db).create_requirement(client.id, body, stage_id=stage.id)
