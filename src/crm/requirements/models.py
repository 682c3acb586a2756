"""Client requirement models -- what a client is looking for.

- Requirement: budget, size and location criteria; owned by a client and
  optionally scoped to one of the client's requests or stages
- RentalPreferences / PurchasePreferences: one-to-one extras by requirement type
- GatheredProperty: a candidate collected for a requirement, either linked
  to a catalogue Property or entered by hand (title/address/price...)
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.crm.core.database import Base, IdMixin, TimestampMixin

if TYPE_CHECKING:
    from src.crm.clients.models import ChecklistItem, Client
    from src.crm.properties.models import Property


class Requirement(IdMixin, TimestampMixin, Base):
    """Search criteria for a purchase or rental."""

    __tablename__ = "requirements"

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    request_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("requests.id", ondelete="CASCADE"), nullable=True, index=True
    )
    stage_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("stages.id", ondelete="CASCADE"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(200), default="New Requirement")
    type: Mapped[str] = mapped_column(String(20), default="PURCHASE")
    property_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    budget_min: Mapped[float] = mapped_column(Float, default=0.0)
    budget_max: Mapped[float] = mapped_column(Float, default=0.0)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    preferred_locations: Mapped[list] = mapped_column(JSON, default=list)
    additional_requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(50), default="Active")

    client: Mapped[Client] = relationship(back_populates="requirements")
    rental_preferences: Mapped[RentalPreferences | None] = relationship(
        back_populates="requirement",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    purchase_preferences: Mapped[PurchasePreferences | None] = relationship(
        back_populates="requirement",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    gathered_properties: Mapped[list[GatheredProperty]] = relationship(
        back_populates="requirement",
        passive_deletes=True,
        order_by="GatheredProperty.created_at.desc()",
        lazy="selectin",
    )
    checklist: Mapped[list[ChecklistItem]] = relationship(
        primaryjoin="ChecklistItem.requirement_id == Requirement.id",
        order_by="ChecklistItem.created_at",
        viewonly=True,
        lazy="selectin",
    )


class RentalPreferences(IdMixin, TimestampMixin, Base):
    """Extra criteria for RENTAL requirements."""

    __tablename__ = "rental_preferences"

    requirement_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("requirements.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    lease_term: Mapped[str] = mapped_column(String(100), default="Long-term")
    furnished: Mapped[bool] = mapped_column(Boolean, default=False)
    pets_allowed: Mapped[bool] = mapped_column(Boolean, default=False)
    max_rental_budget: Mapped[float] = mapped_column(Float, default=0.0)
    preferred_move_in_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    requirement: Mapped[Requirement] = relationship(back_populates="rental_preferences")


class PurchasePreferences(IdMixin, TimestampMixin, Base):
    """Extra criteria for PURCHASE requirements."""

    __tablename__ = "purchase_preferences"

    requirement_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("requirements.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    property_age: Mapped[str | None] = mapped_column(String(100), nullable=True)
    preferred_style: Mapped[str | None] = mapped_column(String(100), nullable=True)
    parking: Mapped[int | None] = mapped_column(Integer, nullable=True)
    lot_size: Mapped[float | None] = mapped_column(Float, nullable=True)
    basement: Mapped[bool] = mapped_column(Boolean, default=False)
    garage: Mapped[bool] = mapped_column(Boolean, default=False)

    requirement: Mapped[Requirement] = relationship(back_populates="purchase_preferences")


class GatheredProperty(IdMixin, TimestampMixin, Base):
    """A candidate property collected for a requirement."""

    __tablename__ = "gathered_properties"

    requirement_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("requirements.id", ondelete="CASCADE"), nullable=False, index=True
    )
    property_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=True
    )
    title: Mapped[str | None] = mapped_column(String(300), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    area: Mapped[float | None] = mapped_column(Float, nullable=True)
    link: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(50), default="Pending")

    requirement: Mapped[Requirement] = relationship(back_populates="gathered_properties")
    property: Mapped[Property | None] = relationship(lazy="selectin")
