"""REST API endpoints for client requirements.

Covers the requirement itself with its rental or purchase preferences,
its checklist, the candidate properties gathered for it (from the
catalogue or entered by hand) and emailing those candidates to the client.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.api.deps import get_client_or_404, get_db, get_requirement_or_404, require_auth
from src.crm.clients.models import Client
from src.crm.clients.repository import ChecklistRepository
from src.crm.core.errors import NotFoundError
from src.crm.notifications.schemas import EmailRead
from src.crm.requirements.models import Requirement
from src.crm.requirements.repository import RequirementRepository
from src.crm.requirements.schemas import (
    GatheredPropertyRead,
    GatheredPropertyUpdate,
    GatherPropertiesRequest,
    ManualPropertyCreate,
    PurchasePreferencesIn,
    RentalPreferencesIn,
    RequirementCreate,
    RequirementEmail,
    RequirementRead,
    RequirementUpdate,
)
from src.crm.schemas.common import (
    ChecklistItemCreate,
    ChecklistItemRead,
    ChecklistItemUpdate,
    SuccessResponse,
)

router = APIRouter(prefix="/api/v1", tags=["requirements"], dependencies=[require_auth])


# ── Client Requirement Endpoints ─────────────────────────────────────────────


@router.get("/clients/{client_id}/requirements", response_model=list[RequirementRead])
async def list_client_requirements(
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequirementRepository(db).list_requirements(client_id=client.id)


@router.post("/clients/{client_id}/requirements", response_model=RequirementRead, status_code=201)
async def create_client_requirement(
    body: RequirementCreate,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Create a requirement with the preferences matching its type."""
    return await RequirementRepository(db).create_requirement(client.id, body)


# ── Requirement Endpoints ────────────────────────────────────────────────────


@router.get("/requirements/{requirement_id}", response_model=RequirementRead)
async def get_requirement(requirement: Requirement = Depends(get_requirement_or_404)):
    return requirement


@router.patch("/requirements/{requirement_id}", response_model=RequirementRead)
async def update_requirement(
    body: RequirementUpdate,
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Partial update; changing the type replaces the preferences."""
    updated = await RequirementRepository(db).update_requirement(requirement.id, body)
    if updated is None:
        raise NotFoundError("Requirement")
    return updated


@router.delete("/requirements/{requirement_id}", response_model=SuccessResponse)
async def delete_requirement(
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    await RequirementRepository(db).delete_requirement(requirement.id)
    return SuccessResponse()


@router.put("/requirements/{requirement_id}/rental-preferences", response_model=RequirementRead)
async def set_rental_preferences(
    body: RentalPreferencesIn,
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequirementRepository(db).set_rental_preferences(requirement, body)


@router.put("/requirements/{requirement_id}/purchase-preferences", response_model=RequirementRead)
async def set_purchase_preferences(
    body: PurchasePreferencesIn,
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequirementRepository(db).set_purchase_preferences(requirement, body)


# ── Requirement Checklist Endpoints ──────────────────────────────────────────


@router.get("/requirements/{requirement_id}/checklist", response_model=list[ChecklistItemRead])
async def list_requirement_checklist(
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await ChecklistRepository(db).list_items({"requirement_id": requirement.id})


@router.post("/requirements/{requirement_id}/checklist", response_model=ChecklistItemRead, status_code=201)
async def add_requirement_checklist_item(
    body: ChecklistItemCreate,
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    checklist = ChecklistRepository(db)
    item = await checklist.add_item({"requirement_id": requirement.id}, body.text)
    await RequirementRepository(db).log_checklist_item(requirement, body.text)
    await checklist.commit()
    return item


@router.patch("/requirements/{requirement_id}/checklist/{item_id}", response_model=ChecklistItemRead)
async def update_requirement_checklist_item(
    item_id: uuid.UUID,
    body: ChecklistItemUpdate,
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    item = await ChecklistRepository(db).update_item(
        {"requirement_id": requirement.id}, item_id, text=body.text, completed=body.completed
    )
    if item is None:
        raise NotFoundError("Checklist item")
    return item


@router.delete("/requirements/{requirement_id}/checklist/{item_id}", response_model=SuccessResponse)
async def delete_requirement_checklist_item(
    item_id: uuid.UUID,
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    if not await ChecklistRepository(db).delete_item({"requirement_id": requirement.id}, item_id):
        raise NotFoundError("Checklist item")
    return SuccessResponse()


# ── Gathered Property Endpoints ──────────────────────────────────────────────


@router.post(
    "/requirements/{requirement_id}/gather",
    response_model=list[GatheredPropertyRead],
    status_code=201,
)
async def gather_properties(
    body: GatherPropertiesRequest,
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Collect catalogue properties as candidates for the requirement."""
    return await RequirementRepository(db).gather_properties(requirement, body)


@router.patch("/requirements/{requirement_id}/gather/{gathered_id}", response_model=GatheredPropertyRead)
async def update_gathered_property(
    gathered_id: uuid.UUID,
    body: GatheredPropertyUpdate,
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    gathered = await RequirementRepository(db).update_gathered(requirement, gathered_id, body)
    if gathered is None:
        raise NotFoundError("Gathered property")
    return gathered


@router.delete("/requirements/{requirement_id}/gather/{gathered_id}", response_model=SuccessResponse)
async def remove_gathered_property(
    gathered_id: uuid.UUID,
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    if not await RequirementRepository(db).remove_gathered(requirement, gathered_id):
        raise NotFoundError("Gathered property")
    return SuccessResponse()


@router.get("/requirements/{requirement_id}/properties", response_model=list[GatheredPropertyRead])
async def list_gathered_properties(
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await RequirementRepository(db).list_gathered(requirement.id)


@router.post(
    "/requirements/{requirement_id}/properties",
    response_model=GatheredPropertyRead,
    status_code=201,
)
async def add_manual_property(
    body: ManualPropertyCreate,
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Record a candidate found outside the property catalogue."""
    return await RequirementRepository(db).add_manual_property(requirement, body)


@router.delete("/requirements/{requirement_id}/properties/{gathered_id}", response_model=SuccessResponse)
async def delete_manual_property(
    gathered_id: uuid.UUID,
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    if not await RequirementRepository(db).remove_gathered(requirement, gathered_id):
        raise NotFoundError("Gathered property")
    return SuccessResponse()


# ── Email Endpoint ───────────────────────────────────────────────────────────


@router.post("/requirements/{requirement_id}/email", response_model=EmailRead, status_code=201)
async def email_client(
    body: RequirementEmail,
    requirement: Requirement = Depends(get_requirement_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Queue an email to the client listing the gathered candidates."""
    return await RequirementRepository(db).email_client(requirement, body)
