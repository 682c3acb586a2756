"""REST API endpoints for client onboarding and process actions.

Both kinds of action live in one table, split by category. Creating an
action fans out its automated tasks (queued email, document request,
meeting suggestion); completing one queues a completion email.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.api.deps import get_client_or_404, get_db, require_auth
from src.crm.clients.models import Client
from src.crm.core.errors import NotFoundError
from src.crm.workflows.models import ActionCategory
from src.crm.workflows.repository import ActionRepository
from src.crm.workflows.schemas import (
    ActionCreate,
    ActionStatusUpdate,
    ClientActionRead,
    OnboardingOverview,
    OnboardingStart,
    OnboardingStatusUpdate,
)
from src.crm.workflows.templates import ONBOARDING_TEMPLATES, OnboardingTemplate

router = APIRouter(prefix="/api/v1/clients", tags=["onboarding"], dependencies=[require_auth])


# ── Onboarding Endpoints ─────────────────────────────────────────────────────


@router.get("/{client_id}/onboarding/templates", response_model=list[OnboardingTemplate])
async def list_onboarding_templates(client: Client = Depends(get_client_or_404)):
    """Built-in Buyer and Seller onboarding bundles."""
    return ONBOARDING_TEMPLATES


@router.post("/{client_id}/onboarding", response_model=list[ClientActionRead], status_code=201)
async def start_onboarding(
    body: OnboardingStart,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Create a batch of onboarding actions and trigger their automated tasks."""
    return await ActionRepository(db).start_onboarding(client, body.actions)


@router.get("/{client_id}/onboarding", response_model=OnboardingOverview)
async def get_onboarding(
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Onboarding actions, the requests and meetings they produced, and progress."""
    return await ActionRepository(db).onboarding_overview(client.id)


@router.get("/{client_id}/onboarding/actions", response_model=list[ClientActionRead])
async def list_onboarding_actions(
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await ActionRepository(db).list_actions(client.id, ActionCategory.ONBOARDING)


@router.post("/{client_id}/onboarding/actions", response_model=ClientActionRead, status_code=201)
async def create_onboarding_action(
    body: ActionCreate,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await ActionRepository(db).create_action(client, ActionCategory.ONBOARDING, body)


@router.patch("/{client_id}/onboarding/status", response_model=ClientActionRead)
async def update_onboarding_status(
    body: OnboardingStatusUpdate,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    repo = ActionRepository(db)
    action = await repo.get_action(client.id, body.action_id, ActionCategory.ONBOARDING)
    if action is None:
        raise NotFoundError("Action")
    return await repo.update_status(client, action, body.status, body.notes)


# ── Process Action Endpoints ─────────────────────────────────────────────────


@router.get("/{client_id}/process/actions", response_model=list[ClientActionRead])
async def list_process_actions(
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await ActionRepository(db).list_actions(client.id, ActionCategory.PROCESS)


@router.post("/{client_id}/process/actions", response_model=ClientActionRead, status_code=201)
async def create_process_action(
    body: ActionCreate,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await ActionRepository(db).create_action(client, ActionCategory.PROCESS, body)


@router.patch("/{client_id}/process/actions/{action_id}", response_model=ClientActionRead)
async def update_process_action(
    action_id: uuid.UUID,
    body: ActionStatusUpdate,
    client: Client = Depends(get_client_or_404),
    db: AsyncSession = Depends(get_db),
):
    repo = ActionRepository(db)
    action = await repo.get_action(client.id, action_id, ActionCategory.PROCESS)
    if action is None:
        raise NotFoundError("Action")
    return await repo.update_status(client, action, body.status, body.notes)
