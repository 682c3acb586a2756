"""Property repository -- listing catalogue, search and sharing with clients."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.crm.clients.activity import add_interaction
from src.crm.clients.models import Client
from src.crm.core.errors import NotFoundError
from src.crm.properties.models import Property, SharedProperty
from src.crm.properties.schemas import (
    RENTAL_FIELDS,
    SALE_FIELDS,
    ListingType,
    PropertyCreate,
    PropertyFilter,
    PropertyImportRequest,
    PropertyUpdate,
)

logger = structlog.get_logger(__name__)


class PropertyRepository:
    """Async CRUD for property listings."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_properties(self) -> list[Property]:
        result = await self._session.execute(select(Property).order_by(Property.created_at.desc()))
        return list(result.scalars().all())

    async def search_properties(self, criteria: PropertyFilter) -> list[Property]:
        """Filter the catalogue; text matches title, address or location."""
        stmt = select(Property)
        if criteria.q:
            pattern = f"%{criteria.q.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Property.title).like(pattern),
                    func.lower(Property.address).like(pattern),
                    func.lower(Property.location).like(pattern),
                )
            )
        if criteria.type:
            stmt = stmt.where(Property.type == criteria.type)
        if criteria.listing_type:
            stmt = stmt.where(Property.listing_type == criteria.listing_type.value)
        if criteria.min_price is not None:
            stmt = stmt.where(Property.price >= criteria.min_price)
        if criteria.max_price is not None:
            stmt = stmt.where(Property.price <= criteria.max_price)
        if criteria.bedrooms is not None:
            stmt = stmt.where(Property.bedrooms >= criteria.bedrooms)
        if criteria.bathrooms is not None:
            stmt = stmt.where(Property.bathrooms >= criteria.bathrooms)

        result = await self._session.execute(
            stmt.order_by(Property.created_at.desc()).limit(criteria.limit)
        )
        return list(result.scalars().all())

    async def create_property(self, data: PropertyCreate) -> Property:
        prop = Property(**data.to_columns())
        self._session.add(prop)
        await self._session.commit()
        logger.info("property_created", property_id=str(prop.id), listing_type=prop.listing_type)
        return prop

    async def get_property(self, property_id: uuid.UUID) -> Property | None:
        return await self._session.get(Property, property_id)

    async def get_property_detail(self, property_id: uuid.UUID) -> Property | None:
        result = await self._session.execute(
            select(Property)
            .where(Property.id == property_id)
            .options(selectinload(Property.shared_with).selectinload(SharedProperty.client))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update_property(self, property_id: uuid.UUID, data: PropertyUpdate) -> Property | None:
        """Apply a partial update.

        Switching ``listing_type`` clears the columns of the other type.
        """
        prop = await self.get_property(property_id)
        if prop is None:
            return None

        changes = data.model_dump(exclude_unset=True)
        if changes.get("listing_type") is not None:
            changes["listing_type"] = data.listing_type.value
        for field, value in changes.items():
            setattr(prop, field, value)

        stale = SALE_FIELDS if prop.listing_type == ListingType.RENTAL.value else RENTAL_FIELDS
        for field in stale:
            setattr(prop, field, None)
        await self._session.commit()
        return prop

    async def delete_property(self, property_id: uuid.UUID) -> bool:
        result = await self._session.execute(delete(Property).where(Property.id == property_id))
        await self._session.commit()
        return result.rowcount > 0

    async def import_property(self, data: PropertyImportRequest) -> Property:
        """Create a placeholder listing for an external URL.

        Listing pages are not fetched; the agent fills in the details later.
        """
        host = data.url.host or str(data.url)
        prop = Property(
            title=f"Imported listing from {host}",
            address="Address pending",
            price=0.0,
            type="House",
            listing_type=data.listing_type.value,
            area=0.0,
            status="Available",
            features=[],
            images=[],
            source=host,
            location="",
            link=str(data.url),
        )
        self._session.add(prop)
        await self._session.commit()
        logger.info("property_imported", property_id=str(prop.id), source=host)
        return prop

    # ── Sharing ──────────────────────────────────────────────────────────

    async def _require(self, model, entity_id: uuid.UUID, label: str):
        row = await self._session.get(model, entity_id)
        if row is None:
            raise NotFoundError(label)
        return row

    async def _reload_shares(self, ids: list[uuid.UUID]) -> list[SharedProperty]:
        result = await self._session.execute(
            select(SharedProperty)
            .where(SharedProperty.id.in_(ids))
            .options(selectinload(SharedProperty.property), selectinload(SharedProperty.client))
            .order_by(SharedProperty.created_at)
        )
        return list(result.scalars().all())

    async def share_with_clients(
        self,
        property_id: uuid.UUID,
        client_ids: list[uuid.UUID],
        stage_id: uuid.UUID | None = None,
    ) -> list[SharedProperty]:
        """Share one property with several clients, logging one interaction per client."""
        await self._require(Property, property_id, "Property")
        shares = []
        for client_id in client_ids:
            await self._require(Client, client_id, "Client")
            shares.append(
                SharedProperty(
                    client_id=client_id,
                    property_id=property_id,
                    stage_id=stage_id,
                    status="Shared",
                )
            )
            add_interaction(
                self._session,
                client_id,
                "Property Share",
                "Shared 1 properties",
                stage_id=stage_id,
            )
        self._session.add_all(shares)
        await self._session.commit()
        return await self._reload_shares([s.id for s in shares])

    async def share_properties(
        self,
        client_id: uuid.UUID,
        property_ids: list[uuid.UUID],
        stage_id: uuid.UUID | None = None,
    ) -> list[SharedProperty]:
        """Share several properties with one client."""
        await self._require(Client, client_id, "Client")
        shares = []
        for property_id in property_ids:
            await self._require(Property, property_id, "Property")
            shares.append(
                SharedProperty(
                    client_id=client_id,
                    property_id=property_id,
                    stage_id=stage_id,
                    status="Shared",
                )
            )
        self._session.add_all(shares)
        add_interaction(
            self._session,
            client_id,
            "Property Share",
            f"Shared {len(shares)} properties",
            stage_id=stage_id,
        )
        await self._session.commit()
        logger.info("properties_shared", client_id=str(client_id), count=len(shares))
        return await self._reload_shares([s.id for s in shares])
