"""REST API endpoints for leads.

Provides lead CRUD, the lead communication log, queued lead emails and
conversion of a lead into a client.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.api.deps import get_db, require_auth
from src.crm.clients.schemas import ClientRead
from src.crm.core.errors import NotFoundError
from src.crm.leads.models import Lead
from src.crm.leads.repository import LeadRepository
from src.crm.leads.schemas import (
    LeadConversion,
    LeadCreate,
    LeadEmail,
    LeadEmailResult,
    LeadInteractionCreate,
    LeadInteractionRead,
    LeadRead,
    LeadUpdate,
)
from src.crm.schemas.common import SuccessResponse

router = APIRouter(prefix="/api/v1/leads", tags=["leads"], dependencies=[require_auth])


async def get_lead_or_404(lead_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> Lead:
    lead = await LeadRepository(db).get_lead(lead_id)
    if lead is None:
        raise NotFoundError("Lead")
    return lead


@router.get("", response_model=list[LeadRead])
async def list_leads(db: AsyncSession = Depends(get_db)):
    return await LeadRepository(db).list_leads()


@router.post("", response_model=LeadRead, status_code=201)
async def create_lead(body: LeadCreate, db: AsyncSession = Depends(get_db)):
    return await LeadRepository(db).create_lead(body)


@router.get("/{lead_id}", response_model=LeadRead)
async def get_lead(lead: Lead = Depends(get_lead_or_404)):
    return lead


@router.patch("/{lead_id}", response_model=LeadRead)
async def update_lead(
    body: LeadUpdate,
    lead: Lead = Depends(get_lead_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await LeadRepository(db).update_lead(lead, body)


@router.delete("/{lead_id}", response_model=SuccessResponse)
async def delete_lead(lead_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await LeadRepository(db).delete_lead(lead_id):
        raise NotFoundError("Lead")
    return SuccessResponse()


@router.post("/{lead_id}/convert", response_model=LeadConversion)
async def convert_lead(lead_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Turn the lead into an active client."""
    client, lead = await LeadRepository(db).convert(lead_id)
    return LeadConversion(client=ClientRead.model_validate(client), lead=LeadRead.model_validate(lead))


@router.post("/{lead_id}/communicate", response_model=LeadInteractionRead, status_code=201)
async def record_communication(
    body: LeadInteractionCreate,
    lead: Lead = Depends(get_lead_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await LeadRepository(db).record_communication(lead, body)


@router.post("/{lead_id}/email", response_model=LeadEmailResult, status_code=201)
async def email_lead(lead_id: uuid.UUID, body: LeadEmail, db: AsyncSession = Depends(get_db)):
    """Queue an email to the lead and log it."""
    email, interaction = await LeadRepository(db).email_lead(lead_id, body)
    return LeadEmailResult(email_id=email.id, interaction=LeadInteractionRead.model_validate(interaction))


@router.get("/{lead_id}/interactions", response_model=list[LeadInteractionRead])
async def list_lead_interactions(
    lead: Lead = Depends(get_lead_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await LeadRepository(db).list_interactions(lead.id)
