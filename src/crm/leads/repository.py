"""Lead repository -- prospects, their communication log and conversion."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.clients.activity import add_interaction
from src.crm.clients.models import Client
from src.crm.config import get_settings
from src.crm.core.errors import CRMError, NotFoundError
from src.crm.leads.models import Lead, LeadInteraction, LeadStatus
from src.crm.leads.schemas import LeadCreate, LeadEmail, LeadInteractionCreate, LeadUpdate
from src.crm.notifications.models import EmailQueue
from src.crm.notifications.repository import queue_email

logger = structlog.get_logger(__name__)


class LeadRepository:
    """Async CRUD for leads."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_leads(self) -> list[Lead]:
        result = await self._session.execute(select(Lead).order_by(Lead.created_at.desc()))
        return list(result.scalars().all())

    async def get_lead(self, lead_id: uuid.UUID) -> Lead | None:
        return await self._session.get(Lead, lead_id)

    async def create_lead(self, data: LeadCreate) -> Lead:
        values = data.model_dump()
        if values["email"] is not None:
            values["email"] = str(values["email"])
        lead = Lead(status=LeadStatus.NEW.value, emails_sent=0, **values)
        self._session.add(lead)
        await self._session.commit()
        logger.info("lead_created", lead_id=str(lead.id), source=lead.source)
        return lead

    async def update_lead(self, lead: Lead, data: LeadUpdate) -> Lead:
        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "status" and value is not None:
                value = value.value
            elif field == "email" and value is not None:
                value = str(value)
            if value is None and field in ("first_name", "last_name", "status"):
                continue
            setattr(lead, field, value)
        await self._session.commit()
        return lead

    async def delete_lead(self, lead_id: uuid.UUID) -> bool:
        result = await self._session.execute(delete(Lead).where(Lead.id == lead_id))
        await self._session.commit()
        return result.rowcount > 0

    async def convert(self, lead_id: uuid.UUID) -> tuple[Client, Lead]:
        """Turn a lead into an active client in one transaction.

        Raises:
            NotFoundError: If the lead does not exist.
            CRMError(400): If the lead was already converted.
        """
        lead = await self.get_lead(lead_id)
        if lead is None:
            raise NotFoundError("Lead")
        if lead.status == LeadStatus.CONVERTED.value or lead.converted_client_id is not None:
            raise CRMError("Lead already converted")

        client = Client(
            name=f"{lead.first_name} {lead.last_name}".strip(),
            email=lead.email,
            phone=lead.phone,
            status="ACTIVE",
            notes=lead.notes,
            pinned=False,
        )
        self._session.add(client)
        await self._session.flush()
        add_interaction(
            self._session,
            client.id,
            "Created",
            "Client profile created",
            notes=f"Converted from lead ({lead.source or 'unknown source'})",
        )

        lead.status = LeadStatus.CONVERTED.value
        lead.converted_at = datetime.now(timezone.utc)
        lead.converted_client_id = client.id
        await self._session.commit()
        logger.info("lead_converted", lead_id=str(lead.id), client_id=str(client.id))
        return client, lead

    # ── Communication ────────────────────────────────────────────────────

    async def list_interactions(self, lead_id: uuid.UUID) -> list[LeadInteraction]:
        result = await self._session.execute(
            select(LeadInteraction)
            .where(LeadInteraction.lead_id == lead_id)
            .order_by(LeadInteraction.date.desc())
        )
        return list(result.scalars().all())

    async def record_communication(self, lead: Lead, data: LeadInteractionCreate) -> LeadInteraction:
        now = datetime.now(timezone.utc)
        interaction = LeadInteraction(lead_id=lead.id, type=data.type, content=data.content, date=now)
        self._session.add(interaction)
        lead.last_contact = now
        await self._session.commit()
        return interaction

    async def email_lead(self, lead_id: uuid.UUID, data: LeadEmail) -> tuple[EmailQueue, LeadInteraction]:
        """Queue an email to the lead and keep a structured copy in its log.

        Raises:
            NotFoundError: If the lead is missing or has no email address.
        """
        lead = await self.get_lead(lead_id)
        if lead is None or not lead.email:
            raise NotFoundError("Lead", "Lead not found or has no email")

        settings = get_settings()
        now = datetime.now(timezone.utc)
        email = queue_email(
            self._session,
            to=lead.email,
            subject=data.subject,
            content=data.content,
            lead_id=lead.id,
            source="lead",
        )
        record = {
            "subject": data.subject,
            "body": data.content,
            "timestamp": now.isoformat(),
            "sender": settings.EMAIL_FROM_ADDRESS,
            "recipient": lead.email,
            "status": "QUEUED",
        }
        interaction = LeadInteraction(
            lead_id=lead.id,
            type="EMAIL",
            content=json.dumps(record, indent=2),
            date=now,
        )
        self._session.add(interaction)
        lead.last_contact = now
        lead.emails_sent = (lead.emails_sent or 0) + 1
        await self._session.commit()
        return email, interaction
