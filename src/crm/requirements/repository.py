"""Requirement repository -- criteria, typed preferences and property gathering.

Requirements always carry their client_id; request- and stage-scoped
requirements additionally carry request_id / stage_id. Each mutation
appends an Interaction and commits once.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.clients.activity import add_interaction
from src.crm.clients.models import Client
from src.crm.core.errors import CRMError, NotFoundError
from src.crm.notifications.repository import compose_letter, queue_email
from src.crm.properties.models import Property
from src.crm.requirements.models import (
    GatheredProperty,
    PurchasePreferences,
    RentalPreferences,
    Requirement,
)
from src.crm.requirements.schemas import (
    GatheredPropertyUpdate,
    GatherPropertiesRequest,
    ManualPropertyCreate,
    PurchasePreferencesIn,
    RentalPreferencesIn,
    RequirementCreate,
    RequirementEmail,
    RequirementType,
    RequirementUpdate,
)

logger = structlog.get_logger(__name__)

# Columns a partial update may not null out
_REQUIRED_FIELDS = frozenset({"name", "type", "budget_min", "budget_max", "preferred_locations", "status"})


# ── Builders ────────────────────────────────────────────────────────────────


def _rental_preferences(prefs: RentalPreferencesIn | None, budget_max: float) -> RentalPreferences:
    prefs = prefs or RentalPreferencesIn()
    return RentalPreferences(
        lease_term=prefs.lease_term or "Long-term",
        furnished=prefs.furnished,
        pets_allowed=prefs.pets_allowed,
        max_rental_budget=prefs.max_rental_budget if prefs.max_rental_budget is not None else budget_max,
        preferred_move_in_date=prefs.preferred_move_in_date,
    )


def _purchase_preferences(prefs: PurchasePreferencesIn | None) -> PurchasePreferences:
    prefs = prefs or PurchasePreferencesIn()
    return PurchasePreferences(**prefs.model_dump())


def _apply_preferences(
    requirement: Requirement,
    rental: RentalPreferencesIn | None = None,
    purchase: PurchasePreferencesIn | None = None,
) -> None:
    """Keep exactly the preference record matching the requirement's type.

    An existing record of the right type is updated in place so the
    one-to-one unique key is never hit by an insert-before-delete flush.
    """
    if requirement.type == RequirementType.RENTAL.value:
        requirement.purchase_preferences = None
        fresh = _rental_preferences(rental, requirement.budget_max)
        current = requirement.rental_preferences
        if current is None:
            requirement.rental_preferences = fresh
        elif rental is not None:
            for field in RentalPreferencesIn.model_fields:
                setattr(current, field, getattr(fresh, field))
    else:
        requirement.rental_preferences = None
        current = requirement.purchase_preferences
        if current is None:
            requirement.purchase_preferences = _purchase_preferences(purchase)
        elif purchase is not None:
            for field, value in purchase.model_dump().items():
                setattr(current, field, value)


def build_requirement(
    data: RequirementCreate,
    *,
    client_id: uuid.UUID,
    request_id: uuid.UUID | None = None,
    stage_id: uuid.UUID | None = None,
) -> Requirement:
    """Build a Requirement with the preference record matching its type."""
    requirement = Requirement(
        client_id=client_id,
        request_id=request_id,
        stage_id=stage_id,
        name=data.name,
        type=data.type.value,
        property_type=data.property_type,
        budget_min=data.budget_min,
        budget_max=data.budget_max,
        bedrooms=data.bedrooms,
        bathrooms=data.bathrooms,
        preferred_locations=list(data.preferred_locations),
        additional_requirements=data.additional_requirements,
        status="Active",
    )
    if data.type == RequirementType.RENTAL:
        requirement.rental_preferences = _rental_preferences(data.rental_preferences, data.budget_max)
    else:
        requirement.purchase_preferences = _purchase_preferences(data.purchase_preferences)
    return requirement


class RequirementRepository:
    """Async CRUD for requirements and their gathered properties."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _reload(self, requirement_id: uuid.UUID) -> Requirement | None:
        result = await self._session.execute(
            select(Requirement)
            .where(Requirement.id == requirement_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    # ── Requirements ─────────────────────────────────────────────────────

    async def list_requirements(
        self,
        *,
        client_id: uuid.UUID | None = None,
        request_id: uuid.UUID | None = None,
        stage_id: uuid.UUID | None = None,
    ) -> list[Requirement]:
        stmt = select(Requirement).order_by(Requirement.created_at.desc())
        if client_id is not None:
            stmt = stmt.where(Requirement.client_id == client_id)
        if request_id is not None:
            stmt = stmt.where(Requirement.request_id == request_id)
        if stage_id is not None:
            stmt = stmt.where(Requirement.stage_id == stage_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_requirement(self, requirement_id: uuid.UUID) -> Requirement | None:
        return await self._session.get(Requirement, requirement_id)

    async def create_requirement(
        self,
        client_id: uuid.UUID,
        data: RequirementCreate,
        *,
        request_id: uuid.UUID | None = None,
        stage_id: uuid.UUID | None = None,
    ) -> Requirement:
        """Create a requirement and log it.

        Request-scoped requirements are logged as REQUIREMENT_CREATED, the
        others as "Requirement Added".
        """
        requirement = build_requirement(
            data, client_id=client_id, request_id=request_id, stage_id=stage_id
        )
        self._session.add(requirement)
        await self._session.flush()

        if request_id is not None:
            add_interaction(
                self._session,
                client_id,
                "REQUIREMENT_CREATED",
                f"New requirement created: {requirement.name}",
                request_id=request_id,
                requirement_id=requirement.id,
            )
        else:
            add_interaction(
                self._session,
                client_id,
                "Requirement Added",
                f"Added new {requirement.type.lower()} requirement: {requirement.name}",
                stage_id=stage_id,
                requirement_id=requirement.id,
            )
        await self._session.commit()
        logger.info("requirement_created", requirement_id=str(requirement.id), client_id=str(client_id))
        return await self._reload(requirement.id)

    async def update_requirement(self, requirement_id: uuid.UUID, data: RequirementUpdate) -> Requirement | None:
        """Apply a partial update; a type change replaces the preference record.

        Request-scoped requirements are logged as REQUIREMENT_UPDATED.
        """
        requirement = await self.get_requirement(requirement_id)
        if requirement is None:
            return None

        changes = data.model_dump(exclude_unset=True, exclude={"rental_preferences", "purchase_preferences"})
        for field, value in changes.items():
            if value is None and field in _REQUIRED_FIELDS:
                continue
            setattr(requirement, field, value.value if isinstance(value, RequirementType) else value)

        _apply_preferences(requirement, data.rental_preferences, data.purchase_preferences)
        await self._session.flush()

        add_interaction(
            self._session,
            requirement.client_id,
            "REQUIREMENT_UPDATED" if requirement.request_id else "Requirement Updated",
            f"Updated {requirement.type.lower()} requirement: {requirement.name}",
            request_id=requirement.request_id,
            stage_id=requirement.stage_id,
            requirement_id=requirement.id,
        )
        await self._session.commit()
        return await self._reload(requirement.id)

    async def delete_requirement(self, requirement_id: uuid.UUID) -> bool:
        requirement = await self.get_requirement(requirement_id)
        if requirement is None:
            return False
        add_interaction(
            self._session,
            requirement.client_id,
            "REQUIREMENT_DELETED" if requirement.request_id else "Requirement Deleted",
            f"Deleted {requirement.type.lower()} requirement: {requirement.name}",
            request_id=requirement.request_id,
            stage_id=requirement.stage_id,
        )
        await self._session.execute(delete(Requirement).where(Requirement.id == requirement_id))
        await self._session.commit()
        return True

    async def set_rental_preferences(self, requirement: Requirement, data: RentalPreferencesIn) -> Requirement:
        """Replace the rental preferences (converts the requirement to RENTAL)."""
        requirement.type = RequirementType.RENTAL.value
        _apply_preferences(requirement, rental=data)
        await self._session.commit()
        return await self._reload(requirement.id)

    async def set_purchase_preferences(self, requirement: Requirement, data: PurchasePreferencesIn) -> Requirement:
        """Replace the purchase preferences (converts the requirement to PURCHASE)."""
        requirement.type = RequirementType.PURCHASE.value
        _apply_preferences(requirement, purchase=data)
        await self._session.commit()
        return await self._reload(requirement.id)

    async def log_checklist_item(self, requirement: Requirement, text: str) -> None:
        """Record a checklist addition (committed by the caller)."""
        add_interaction(
            self._session,
            requirement.client_id,
            "CHECKLIST_ITEM_ADDED",
            f"Checklist item added: {text}",
            request_id=requirement.request_id,
            requirement_id=requirement.id,
        )

    # ── Gathered Properties ──────────────────────────────────────────────

    async def list_gathered(self, requirement_id: uuid.UUID) -> list[GatheredProperty]:
        result = await self._session.execute(
            select(GatheredProperty)
            .where(GatheredProperty.requirement_id == requirement_id)
            .order_by(GatheredProperty.created_at.desc())
        )
        return list(result.scalars().all())

    async def gather_properties(
        self, requirement: Requirement, data: GatherPropertiesRequest
    ) -> list[GatheredProperty]:
        """Collect catalogue properties for a requirement.

        Raises:
            NotFoundError: If any property id is unknown; nothing is written.
        """
        properties: list[Property] = []
        for property_id in data.property_ids:
            prop = await self._session.get(Property, property_id)
            if prop is None:
                raise NotFoundError(f"Property {property_id}")
            properties.append(prop)

        gathered = [
            GatheredProperty(
                requirement_id=requirement.id,
                property_id=prop.id,
                title=prop.title,
                address=prop.address,
                price=prop.price,
                bedrooms=prop.bedrooms,
                bathrooms=prop.bathrooms,
                area=prop.area,
                link=prop.link,
                notes=data.notes.get(str(prop.id)),
                status="Pending",
            )
            for prop in properties
        ]
        self._session.add_all(gathered)
        add_interaction(
            self._session,
            requirement.client_id,
            "Properties Gathered",
            f"Gathered {len(gathered)} properties for {requirement.type.lower()} requirement: {requirement.name}",
            requirement_id=requirement.id,
        )
        await self._session.commit()
        return await self._reload_gathered([g.id for g in gathered])

    async def _reload_gathered(self, ids: list[uuid.UUID]) -> list[GatheredProperty]:
        result = await self._session.execute(
            select(GatheredProperty)
            .where(GatheredProperty.id.in_(ids))
            .order_by(GatheredProperty.created_at)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_gathered(self, requirement_id: uuid.UUID, gathered_id: uuid.UUID) -> GatheredProperty | None:
        result = await self._session.execute(
            select(GatheredProperty).where(
                GatheredProperty.id == gathered_id,
                GatheredProperty.requirement_id == requirement_id,
            )
        )
        return result.scalar_one_or_none()

    async def update_gathered(
        self, requirement: Requirement, gathered_id: uuid.UUID, data: GatheredPropertyUpdate
    ) -> GatheredProperty | None:
        gathered = await self.get_gathered(requirement.id, gathered_id)
        if gathered is None:
            return None
        if data.notes is not None:
            gathered.notes = data.notes
        if data.status is not None and data.status != gathered.status:
            gathered.status = data.status
            add_interaction(
                self._session,
                requirement.client_id,
                "Property Status Update",
                f"Updated status to {data.status} for property: {gathered.title}",
                requirement_id=requirement.id,
            )
        await self._session.commit()
        return gathered

    async def remove_gathered(self, requirement: Requirement, gathered_id: uuid.UUID) -> bool:
        gathered = await self.get_gathered(requirement.id, gathered_id)
        if gathered is None:
            return False
        add_interaction(
            self._session,
            requirement.client_id,
            "Property Removed",
            f"Removed property: {gathered.title}",
            requirement_id=requirement.id,
        )
        await self._session.execute(delete(GatheredProperty).where(GatheredProperty.id == gathered_id))
        await self._session.commit()
        return True

    async def add_manual_property(self, requirement: Requirement, data: ManualPropertyCreate) -> GatheredProperty:
        """Record a candidate found outside the catalogue."""
        gathered = GatheredProperty(
            requirement_id=requirement.id,
            status="Pending",
            **data.model_dump(),
        )
        self._session.add(gathered)
        add_interaction(
            self._session,
            requirement.client_id,
            "PROPERTY_GATHERED",
            f'Property "{data.title}" gathered for requirement',
            request_id=requirement.request_id,
            requirement_id=requirement.id,
        )
        await self._session.commit()
        (reloaded,) = await self._reload_gathered([gathered.id])
        return reloaded

    # ── Email ────────────────────────────────────────────────────────────

    async def email_client(self, requirement: Requirement, data: RequirementEmail):
        """Queue an email to the requirement's client listing gathered candidates.

        Raises:
            NotFoundError: If the client no longer exists.
            CRMError(400): If the client has no email address.
        """
        client = await self._session.get(Client, requirement.client_id)
        if client is None:
            raise NotFoundError("Client")
        if not client.email:
            raise CRMError("Client has no email address")

        candidates = await self.list_gathered(requirement.id)
        if data.gathered_ids is not None:
            wanted = set(data.gathered_ids)
            candidates = [c for c in candidates if c.id in wanted]

        lines = [data.content]
        if candidates:
            lines.append("")
            lines.append("Properties selected for you:")
            for candidate in candidates:
                price = f" - ${candidate.price:,.0f}" if candidate.price is not None else ""
                address = f", {candidate.address}" if candidate.address else ""
                link = f" ({candidate.link})" if candidate.link else ""
                lines.append(f"* {candidate.title}{address}{price}{link}")

        email = queue_email(
            self._session,
            to=client.email,
            subject=data.subject,
            content=compose_letter(client.name, "\n".join(lines)),
            client_id=client.id,
            source="requirement",
        )
        add_interaction(
            self._session,
            client.id,
            "EMAIL_SENT",
            f"Email sent: {data.subject}",
            request_id=requirement.request_id,
            requirement_id=requirement.id,
        )
        await self._session.commit()
        return email
