"""REST API endpoints for clients.

Provides the client list and detail views, duplicate checking, search, and
the per-client activity log, documents and checklist. Workflow routes
nested under a client (onboarding, stages, requests, requirements) live in
their own modules.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.api.deps import get_client_or_404, get_db, require_auth
from src.crm.clients.models import Client
from src.crm.clients.repository import ChecklistRepository, ClientRepository
from src.crm.clients.schemas import (
    ClientCreate,
    ClientDetail,
    ClientMatch,
    ClientRead,
    ClientSummary,
    ClientUpdate,
    ClientValidate,
    DocumentRead,
    DocumentsCreate,
    DuplicateCheckResponse,
    InteractionCreate,
    InteractionRead,
)
from src.crm.core.errors import ConflictError, NotFoundError
from src.crm.schemas.common import (
    ChecklistItemCreate,
    ChecklistItemRead,
    ChecklistItemUpdate,
    SuccessResponse,
)

router = APIRouter(prefix="/api/v1/clients", tags=["clients"], dependencies=[require_auth])


# ── Client Endpoints ─────────────────────────────────────────────────────────


@router.get("", response_model=list[ClientSummary])
async def list_clients(db: AsyncSession = Depends(get_db)):
    """List clients, pinned first then newest, with their latest interaction."""
    rows = await ClientRepository(db).list_clients()
    summaries = []
    for client, latest in rows:
        summary = ClientSummary.model_validate(client)
        if latest is not None:
            summary.latest_interaction = InteractionRead.model_validate(latest)
        summaries.append(summary)
    return summaries


@router.post("/validate", response_model=DuplicateCheckResponse)
async def validate_client(body: ClientValidate, db: AsyncSession = Depends(get_db)):
    """Check for existing clients with the same name, email or phone.

    Returns 409 with the matches when any are found.
    """
    matches = await ClientRepository(db).find_duplicates(body)
    if not matches:
        return DuplicateCheckResponse(exists=False)
    payload = DuplicateCheckResponse(
        exists=True,
        matches=[ClientMatch.model_validate(m) for m in matches],
        message="A client with matching details already exists",
    )
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=payload.model_dump(mode="json"))


@router.post("", response_model=ClientDetail, status_code=201)
async def create_client(body: ClientCreate, db: AsyncSession = Depends(get_db)):
    """Create a client, optionally with an initial requirement."""
    repo = ClientRepository(db)
    if not body.force_create and await repo.find_duplicates(body):
        raise ConflictError("Client already exists")
    return await repo.create_client(body)


@router.get("/search", response_model=list[ClientRead])
async def search_clients(
    q: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    """Top five clients whose name or email contains ``q``."""
    return await ClientRepository(db).search_clients(q)


@router.get("/{client_id}", response_model=ClientDetail)
async def get_client(client_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    client = await ClientRepository(db).get_client_detail(client_id)
    if client is None:
        raise NotFoundError("Client")
    return client


@router.patch("/{client_id}", response_model=ClientDetail)
async def update_client(client_id: uuid.UUID, body: ClientUpdate, db: AsyncSession = Depends(get_db)):
    client = await ClientRepository(db).update_client(client_id, body)
    if client is None:
        raise NotFoundError("Client")
    return client


@router.delete("/{client_id}", response_model=SuccessResponse)
async def delete_client(client_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Delete a client and everything attached to it."""
    if not await ClientRepository(db).delete_client(client_id):
        raise NotFoundError("Client")
    return SuccessResponse()


# ── Interaction Endpoints ────────────────────────────────────────────────────


@router.get("/{client_id}/interactions", response_model=list[InteractionRead])
async def list_interactions(
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await ClientRepository(db).list_interactions(client.id)


@router.post("/{client_id}/interactions", response_model=InteractionRead, status_code=201)
async def log_interaction(
    body: InteractionCreate,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await ClientRepository(db).log_interaction(client.id, body)


# ── Document Endpoints ───────────────────────────────────────────────────────


@router.get("/{client_id}/documents", response_model=list[DocumentRead])
async def list_documents(
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await ClientRepository(db).list_documents(client.id)


@router.post("/{client_id}/documents", response_model=list[DocumentRead], status_code=201)
async def add_documents(
    body: DocumentsCreate,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Record already-uploaded files against the client."""
    return await ClientRepository(db).add_documents(client.id, body)


@router.delete("/{client_id}/documents/{document_id}", response_model=SuccessResponse)
async def delete_document(
    document_id: uuid.UUID,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    if not await ClientRepository(db).delete_document(client.id, document_id):
        raise NotFoundError("Document")
    return SuccessResponse()


# ── Checklist Endpoints ──────────────────────────────────────────────────────


@router.get("/{client_id}/checklist", response_model=list[ChecklistItemRead])
async def list_checklist(
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await ChecklistRepository(db).list_items({"client_id": client.id})


@router.post("/{client_id}/checklist", response_model=ChecklistItemRead, status_code=201)
async def add_checklist_item(
    body: ChecklistItemCreate,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    repo = ChecklistRepository(db)
    item = await repo.add_item({"client_id": client.id}, body.text)
    await repo.commit()
    return item


@router.patch("/{client_id}/checklist/{item_id}", response_model=ChecklistItemRead)
async def update_checklist_item(
    item_id: uuid.UUID,
    body: ChecklistItemUpdate,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    item = await ChecklistRepository(db).update_item(
        {"client_id": client.id}, item_id, text=body.text, completed=body.completed
    )
    if item is None:
        raise NotFoundError("Checklist item")
    return item


@router.delete("/{client_id}/checklist/{item_id}", response_model=SuccessResponse)
async def delete_checklist_item(
    item_id: uuid.UUID,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    if not await ChecklistRepository(db).delete_item({"client_id": client.id}, item_id):
        raise NotFoundError("Checklist item")
    return SuccessResponse()
