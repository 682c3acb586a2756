"""Property listing models.

- Property: a listing for sale or rent, with type-specific columns
  (furnished/pets/lease term for rentals, lot/basement/garage/parking/style for sales)
- SharedProperty: a property sent to a client, optionally within a stage
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.crm.core.database import Base, IdMixin, TimestampMixin, utcnow

if TYPE_CHECKING:
    from src.crm.clients.models import Client


class Property(IdMixin, TimestampMixin, Base):
    """A listing in the agent's catalogue."""

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    listing_type: Mapped[str] = mapped_column(String(20), default="SALE", index=True)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    area: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[str] = mapped_column(String(50), default="Available")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    features: Mapped[list] = mapped_column(JSON, default=list)
    images: Mapped[list] = mapped_column(JSON, default=list)
    source: Mapped[str | None] = mapped_column(String(200), nullable=True)
    location: Mapped[str | None] = mapped_column(String(300), nullable=True)
    year_built: Mapped[int | None] = mapped_column(Integer, nullable=True)
    link: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Rental listings
    furnished: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    pets_allowed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    lease_term: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Sale listings
    lot_size: Mapped[float | None] = mapped_column(Float, nullable=True)
    basement: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    garage: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    parking_spaces: Mapped[int | None] = mapped_column(Integer, nullable=True)
    property_style: Mapped[str | None] = mapped_column(String(100), nullable=True)

    shared_with: Mapped[list[SharedProperty]] = relationship(
        back_populates="property",
        passive_deletes=True,
        order_by="SharedProperty.shared_date.desc()",
    )


class SharedProperty(IdMixin, TimestampMixin, Base):
    """A property shared with a client."""

    __tablename__ = "shared_properties"

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    stage_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("stages.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(50), default="Shared")
    shared_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    client: Mapped[Client] = relationship(back_populates="shared_properties")
    property: Mapped[Property] = relationship(back_populates="shared_with")
