"""REST API endpoints for client requests.

A request is a purchase, rental or sale engagement. New requests are
seeded with the default processes for their type; processes, tasks,
requirements and checklist items can then be managed underneath.
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
from src.crm.workflows.models import Process, Request
from src.crm.workflows.repository import RequestRepository
from src.crm.workflows.schemas import (
    ProcessCreate,
    ProcessRead,
    ProcessTaskRead,
    ProcessUpdate,
    RequestCreate,
    RequestRead,
    RequestUpdate,
    TaskCreate,
    TaskUpdate,
)

router = APIRouter(prefix="/api/v1/clients", tags=["requests"], dependencies=[require_auth])


async def get_request_or_404(
    request_id: uuid.UUID,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
) -> Request:
    request = await RequestRepository(db).get_request(client.id, request_id)
    if request is None:
        raise NotFoundError("Request")
    return request


async def get_request_process_or_404(
    process_id: uuid.UUID,
    request: Request = Depends(get_request_or_404),
    db: AsyncSession = Depends(get_db),
) -> Process:
    process = await RequestRepository(db).get_process(request, process_id)
    if process is None:
        raise NotFoundError("Process")
    return process


# ── Request Endpoints ────────────────────────────────────────────────────────


@router.get("/{client_id}/requests", response_model=list[RequestRead])
async def list_requests(
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequestRepository(db).list_requests(client.id)


@router.post("/{client_id}/requests", response_model=RequestRead, status_code=201)
async def create_request(
    body: RequestCreate,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Open a request seeded with the default processes for its type."""
    return await RequestRepository(db).create_request(client.id, body.type.value)


@router.patch("/{client_id}/requests/{request_id}", response_model=RequestRead)
async def update_request(
    body: RequestUpdate,
    request: Request = Depends(get_request_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequestRepository(db).update_status(request, body.status)


@router.delete("/{client_id}/requests/{request_id}", response_model=SuccessResponse)
async def delete_request(
    request: Request = Depends(get_request_or_404),
    db: AsyncSession = Depends(get_db),
):
    await RequestRepository(db).delete_request(request)
    return SuccessResponse()


# ── Request Checklist Endpoints ──────────────────────────────────────────────


@router.get("/{client_id}/requests/{request_id}/checklist", response_model=list[ChecklistItemRead])
async def list_request_checklist(
    request: Request = Depends(get_request_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await ChecklistRepository(db).list_items({"request_id": request.id})


@router.post(
    "/{client_id}/requests/{request_id}/checklist",
    response_model=ChecklistItemRead,
    status_code=201,
)
async def add_request_checklist_item(
    body: ChecklistItemCreate,
    request: Request = Depends(get_request_or_404),
    db: AsyncSession = Depends(get_db),
):
    repo = ChecklistRepository(db)
    item = await repo.add_item({"request_id": request.id}, body.text)
    await repo.commit()
    return item


@router.patch("/{client_id}/requests/{request_id}/checklist/{item_id}", response_model=ChecklistItemRead)
async def update_request_checklist_item(
    item_id: uuid.UUID,
    body: ChecklistItemUpdate,
    request: Request = Depends(get_request_or_404),
    db: AsyncSession = Depends(get_db),
):
    item = await ChecklistRepository(db).update_item(
        {"request_id": request.id}, item_id, text=body.text, completed=body.completed
    )
    if item is None:
        raise NotFoundError("Checklist item")
    return item


@router.delete("/{client_id}/requests/{request_id}/checklist/{item_id}", response_model=SuccessResponse)
async def delete_request_checklist_item(
    item_id: uuid.UUID,
    request: Request = Depends(get_request_or_404),
    db: AsyncSession = Depends(get_db),
):
    if not await ChecklistRepository(db).delete_item({"request_id": request.id}, item_id):
        raise NotFoundError("Checklist item")
    return SuccessResponse()


# ── Request Process Endpoints ────────────────────────────────────────────────


@router.get("/{client_id}/requests/{request_id}/processes", response_model=list[ProcessRead])
async def list_request_processes(
    request: Request = Depends(get_request_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequestRepository(db).list_processes(request)


@router.post(
    "/{client_id}/requests/{request_id}/processes",
    response_model=ProcessRead,
    status_code=201,
)
async def create_request_process(
    body: ProcessCreate,
    client: Client = Depends(get_client_or_404),
    request: Request = Depends(get_request_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequestRepository(db).create_process(client, request, body)


@router.patch("/{client_id}/requests/{request_id}/processes/{process_id}", response_model=ProcessRead)
async def update_request_process(
    body: ProcessUpdate,
    request: Request = Depends(get_request_or_404),
    process: Process = Depends(get_request_process_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequestRepository(db).update_process(request, process, body)


@router.delete("/{client_id}/requests/{request_id}/processes/{process_id}", response_model=SuccessResponse)
async def delete_request_process(
    process_id: uuid.UUID,
    request: Request = Depends(get_request_or_404),
    db: AsyncSession = Depends(get_db),
):
    if not await RequestRepository(db).delete_process(request, process_id):
        raise NotFoundError("Process")
    return SuccessResponse()


# ── Process Task Endpoints ───────────────────────────────────────────────────


@router.get(
    "/{client_id}/requests/{request_id}/processes/{process_id}/tasks",
    response_model=list[ProcessTaskRead],
)
async def list_process_tasks(
    process: Process = Depends(get_request_process_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequestRepository(db).list_tasks(process)


@router.post(
    "/{client_id}/requests/{request_id}/processes/{process_id}/tasks",
    response_model=ProcessTaskRead,
    status_code=201,
)
async def create_process_task(
    body: TaskCreate,
    request: Request = Depends(get_request_or_404),
    process: Process = Depends(get_request_process_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequestRepository(db).create_task(request, process, body.type)


@router.patch(
    "/{client_id}/requests/{request_id}/processes/{process_id}/tasks/{task_id}",
    response_model=ProcessTaskRead,
)
async def update_process_task(
    task_id: uuid.UUID,
    body: TaskUpdate,
    process: Process = Depends(get_request_process_or_404),
    db: AsyncSession = Depends(get_db),
):
    task = await RequestRepository(db).update_task(process, task_id, body.status, body.notes)
    if task is None:
        raise NotFoundError("Task")
    return task


@router.delete(
    "/{client_id}/requests/{request_id}/processes/{process_id}/tasks/{task_id}",
    response_model=SuccessResponse,
)
async def delete_process_task(
    task_id: uuid.UUID,
    process: Process = Depends(get_request_process_or_404),
    db: AsyncSession = Depends(get_db),
):
    if not await RequestRepository(db).delete_task(process, task_id):
        raise NotFoundError("Task")
    return SuccessResponse()


# ── Request Requirement Endpoints ────────────────────────────────────────────


@router.get("/{client_id}/requests/{request_id}/requirements", response_model=list[RequirementRead])
async def list_request_requirements(
    request: Request = Depends(get_request_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequirementRepository(db).list_requirements(request_id=request.id)


@router.post(
    "/{client_id}/requests/{request_id}/requirements",
    response_model=RequirementRead,
    status_code=201,
)
async def create_request_requirement(
    body: RequirementCreate,
    client: Client = Depends(get_client_or_404),
    request: Request = Depends(get_request_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequirementRepository(db).create_requirement(client.id, body, request_id=request.id)
