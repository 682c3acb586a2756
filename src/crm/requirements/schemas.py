"""Pydantic schemas for client requirements, preferences and gathered properties."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.crm.properties.schemas import PropertyRead
from src.crm.schemas.common import ChecklistItemRead, ORMModel


class RequirementType(str, Enum):
    PURCHASE = "PURCHASE"
    RENTAL = "RENTAL"


# ── Preferences ─────────────────────────────────────────────────────────────


class RentalPreferencesIn(BaseModel):
    lease_term: str = "Long-term"
    furnished: bool = False
    pets_allowed: bool = False
    max_rental_budget: float | None = Field(default=None, ge=0)
    preferred_move_in_date: datetime | None = None


class PurchasePreferencesIn(BaseModel):
    property_age: str | None = None
    preferred_style: str | None = None
    parking: int | None = Field(default=None, ge=0)
    lot_size: float | None = Field(default=None, ge=0)
    basement: bool = False
    garage: bool = False


class RentalPreferencesRead(RentalPreferencesIn, ORMModel):
    id: uuid.UUID
    requirement_id: uuid.UUID
    max_rental_budget: float = 0.0


class PurchasePreferencesRead(PurchasePreferencesIn, ORMModel):
    id: uuid.UUID
    requirement_id: uuid.UUID


# ── Requirements ────────────────────────────────────────────────────────────


class RequirementCreate(BaseModel):
    """Schema for creating a requirement.

    Preferences matching ``type`` are created alongside; when omitted the
    defaults are used (a rental's max budget falls back to ``budget_max``).
    """

    name: str = Field(default="New Requirement", min_length=1, max_length=200)
    type: RequirementType = RequirementType.PURCHASE
    property_type: str | None = None
    budget_min: float = Field(default=0.0, ge=0)
    budget_max: float = Field(default=0.0, ge=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    preferred_locations: list[str] = Field(default_factory=list)
    additional_requirements: str | None = None
    rental_preferences: RentalPreferencesIn | None = None
    purchase_preferences: PurchasePreferencesIn | None = None


class RequirementUpdate(BaseModel):
    """Partial update. Changing ``type`` swaps the preference record."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    type: RequirementType | None = None
    property_type: str | None = None
    budget_min: float | None = Field(default=None, ge=0)
    budget_max: float | None = Field(default=None, ge=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    preferred_locations: list[str] | None = None
    additional_requirements: str | None = None
    status: str | None = None
    rental_preferences: RentalPreferencesIn | None = None
    purchase_preferences: PurchasePreferencesIn | None = None


class GatheredPropertyRead(ORMModel):
    id: uuid.UUID
    requirement_id: uuid.UUID
    property_id: uuid.UUID | None = None
    title: str | None = None
    address: str | None = None
    price: float | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    area: float | None = None
    link: str | None = None
    notes: str | None = None
    status: str
    created_at: datetime
    property: PropertyRead | None = None


class RequirementRead(ORMModel):
    id: uuid.UUID
    client_id: uuid.UUID
    request_id: uuid.UUID | None = None
    stage_id: uuid.UUID | None = None
    name: str
    type: str
    property_type: str | None = None
    budget_min: float
    budget_max: float
    bedrooms: int | None = None
    bathrooms: int | None = None
    preferred_locations: list[str] = Field(default_factory=list)
    additional_requirements: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime
    rental_preferences: RentalPreferencesRead | None = None
    purchase_preferences: PurchasePreferencesRead | None = None
    gathered_properties: list[GatheredPropertyRead] = Field(default_factory=list)
    checklist: list[ChecklistItemRead] = Field(default_factory=list)


# ── Gathering ───────────────────────────────────────────────────────────────


class GatherPropertiesRequest(BaseModel):
    """Collect catalogue properties for a requirement; notes keyed by property id."""

    property_ids: list[uuid.UUID] = Field(..., min_length=1)
    notes: dict[str, str] = Field(default_factory=dict)


class GatheredPropertyUpdate(BaseModel):
    status: str | None = None
    notes: str | None = None


class ManualPropertyCreate(BaseModel):
    """A candidate entered by hand rather than picked from the catalogue."""

    title: str = Field(..., min_length=1, max_length=300)
    address: str | None = None
    price: float | None = Field(default=None, ge=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    area: float | None = Field(default=None, ge=0)
    link: str | None = None
    notes: str | None = None


class RequirementEmail(BaseModel):
    """Email the client about a requirement, listing the chosen candidates."""

    subject: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    gathered_ids: list[uuid.UUID] | None = Field(
        default=None,
        description="Gathered properties to list; all of the requirement's when omitted",
    )
