"""REST API endpoints for the property catalogue.

Provides listing CRUD, filtered search, placeholder import from a listing
URL and sharing properties with clients.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.api.deps import get_db, require_auth
from src.crm.core.errors import NotFoundError
from src.crm.properties.repository import PropertyRepository
from src.crm.properties.schemas import (
    ListingType,
    PropertyCreate,
    PropertyDetail,
    PropertyFilter,
    PropertyImportRequest,
    PropertyRead,
    PropertyUpdate,
    SharePropertiesRequest,
    ShareRead,
    ShareWithClientsRequest,
)
from src.crm.schemas.common import SuccessResponse

router = APIRouter(prefix="/api/v1/properties", tags=["properties"], dependencies=[require_auth])


@router.get("", response_model=list[PropertyRead])
async def list_properties(db: AsyncSession = Depends(get_db)):
    """All properties, newest first."""
    return await PropertyRepository(db).list_properties()


@router.post("", response_model=PropertyRead, status_code=201)
async def create_property(body: PropertyCreate, db: AsyncSession = Depends(get_db)):
    """Create a listing; only the fields of its listing type are kept."""
    return await PropertyRepository(db).create_property(body)


@router.get("/search", response_model=list[PropertyRead])
async def search_properties(
    q: str | None = None,
    type: str | None = None,
    listing_type: ListingType | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    bedrooms: int | None = Query(default=None, ge=0),
    bathrooms: int | None = Query(default=None, ge=0),
    limit: int = Query(default=50, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    """Filter the catalogue; bedrooms and bathrooms are minimums."""
    criteria = PropertyFilter(
        q=q,
        type=type,
        listing_type=listing_type,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        limit=limit,
    )
    return await PropertyRepository(db).search_properties(criteria)


@router.post("/import", response_model=PropertyRead, status_code=201)
async def import_property(body: PropertyImportRequest, db: AsyncSession = Depends(get_db)):
    """Create a placeholder listing from an external listing URL."""
    return await PropertyRepository(db).import_property(body)


@router.post("/share", response_model=list[ShareRead], status_code=201)
async def share_properties(body: SharePropertiesRequest, db: AsyncSession = Depends(get_db)):
    """Share several properties with one client."""
    return await PropertyRepository(db).share_properties(body.client_id, body.property_ids, body.stage_id)


@router.get("/{property_id}", response_model=PropertyDetail)
async def get_property(property_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    prop = await PropertyRepository(db).get_property_detail(property_id)
    if prop is None:
        raise NotFoundError("Property")
    return prop


@router.patch("/{property_id}", response_model=PropertyRead)
async def update_property(property_id: uuid.UUID, body: PropertyUpdate, db: AsyncSession = Depends(get_db)):
    prop = await PropertyRepository(db).update_property(property_id, body)
    if prop is None:
        raise NotFoundError("Property")
    return prop


@router.delete("/{property_id}", response_model=SuccessResponse)
async def delete_property(property_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await PropertyRepository(db).delete_property(property_id):
        raise NotFoundError("Property")
    return SuccessResponse()


@router.post("/{property_id}/share", response_model=list[ShareRead], status_code=201)
async def share_with_clients(
    property_id: uuid.UUID,
    body: ShareWithClientsRequest,
    db: AsyncSession = Depends(get_db),
):
    """Share one property with several clients."""
    return await PropertyRepository(db).share_with_clients(property_id, body.client_ids, body.stage_id)
