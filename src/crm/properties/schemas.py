"""Pydantic schemas for property listings and sharing."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, HttpUrl, field_validator

from src.crm.schemas.common import ORMModel


class ListingType(str, Enum):
    SALE = "SALE"
    RENTAL = "RENTAL"


# Columns that only apply to one listing type
RENTAL_FIELDS = ("furnished", "pets_allowed", "lease_term")
SALE_FIELDS = ("lot_size", "basement", "garage", "parking_spaces", "property_style")


class PropertyBase(BaseModel):
    """Fields common to create and read."""

    title: str = Field(..., min_length=1, max_length=300)
    address: str = Field(..., min_length=1, max_length=500)
    price: float = Field(..., ge=0)
    type: str = Field(..., min_length=1, max_length=100)
    listing_type: ListingType = ListingType.SALE
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    area: float = Field(default=0.0, ge=0)
    status: str = "Available"
    description: str | None = None
    features: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    source: str | None = None
    location: str | None = None
    year_built: int | None = None
    link: str | None = None

    furnished: bool | None = None
    pets_allowed: bool | None = None
    lease_term: str | None = None

    lot_size: float | None = None
    basement: bool | None = None
    garage: bool | None = None
    parking_spaces: int | None = None
    property_style: str | None = None


class PropertyCreate(PropertyBase):
    """Schema for creating a listing.

    Type-specific fields that do not match ``listing_type`` are dropped.
    """

    def to_columns(self) -> dict:
        data = self.model_dump()
        data["listing_type"] = self.listing_type.value
        if self.listing_type == ListingType.RENTAL:
            for name in SALE_FIELDS:
                data.pop(name)
            data["furnished"] = bool(self.furnished)
            data["pets_allowed"] = bool(self.pets_allowed)
        else:
            for name in RENTAL_FIELDS:
                data.pop(name)
            data["basement"] = bool(self.basement)
            data["garage"] = bool(self.garage)
        return data


class PropertyUpdate(BaseModel):
    """Partial update; only provided fields are written."""

    title: str | None = Field(default=None, min_length=1, max_length=300)
    address: str | None = Field(default=None, min_length=1, max_length=500)
    price: float | None = Field(default=None, ge=0)
    type: str | None = None
    listing_type: ListingType | None = None
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    area: float | None = Field(default=None, ge=0)
    status: str | None = None
    description: str | None = None
    features: list[str] | None = None
    images: list[str] | None = None
    source: str | None = None
    location: str | None = None
    year_built: int | None = None
    link: str | None = None
    furnished: bool | None = None
    pets_allowed: bool | None = None
    lease_term: str | None = None
    lot_size: float | None = None
    basement: bool | None = None
    garage: bool | None = None
    parking_spaces: int | None = None
    property_style: str | None = None

    @field_validator("title", "address", "price", "type", "listing_type", "area", "status")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class PropertyRead(PropertyBase, ORMModel):
    """Schema for reading a listing."""

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class PropertyFilter(BaseModel):
    """Search criteria; bedrooms and bathrooms are minimums."""

    q: str | None = None
    type: str | None = None
    listing_type: ListingType | None = None
    min_price: float | None = None
    max_price: float | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    limit: int = Field(default=50, ge=1, le=50)


# ── Sharing ─────────────────────────────────────────────────────────────────


class ClientBrief(ORMModel):
    id: uuid.UUID
    name: str
    email: str | None = None


class SharedPropertyRead(ORMModel):
    """A property shared with a client, with the listing embedded."""

    id: uuid.UUID
    client_id: uuid.UUID
    property_id: uuid.UUID
    stage_id: uuid.UUID | None = None
    status: str
    shared_date: datetime
    property: PropertyRead


class ShareRead(SharedPropertyRead):
    """Result of a share operation: the listing and the recipient."""

    client: ClientBrief


class PropertyShareRecipient(ORMModel):
    """A client a property was shared with."""

    id: uuid.UUID
    client_id: uuid.UUID
    status: str
    shared_date: datetime
    client: ClientBrief


class PropertyDetail(PropertyRead):
    """A listing plus everyone it was shared with."""

    shared_with: list[PropertyShareRecipient] = Field(default_factory=list)


class ShareWithClientsRequest(BaseModel):
    """Share one property with several clients."""

    client_ids: list[uuid.UUID] = Field(..., min_length=1)
    stage_id: uuid.UUID | None = None


class SharePropertiesRequest(BaseModel):
    """Share several properties with one client."""

    client_id: uuid.UUID
    property_ids: list[uuid.UUID] = Field(..., min_length=1)
    stage_id: uuid.UUID | None = None


class PropertyImportRequest(BaseModel):
    """Create a placeholder listing from an external listing URL."""

    url: HttpUrl
    listing_type: ListingType = ListingType.SALE
