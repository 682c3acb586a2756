"""Financial tracking models: commissions, transactions and goals."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.crm.core.database import Base, IdMixin, TimestampMixin, utcnow

if TYPE_CHECKING:
    from src.crm.clients.models import Client
    from src.crm.properties.models import Property


class Commission(IdMixin, TimestampMixin, Base):
    """Commission owed to the agent on a property deal."""

    __tablename__ = "commissions"

    amount: Mapped[float] = mapped_column(Float, nullable=False)
    percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="PENDING", index=True)
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    paid_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )

    property: Mapped[Property] = relationship(lazy="selectin")
    client: Mapped[Client] = relationship(lazy="selectin")


class Transaction(IdMixin, TimestampMixin, Base):
    """An income or expense entry in the agent's books."""

    __tablename__ = "transactions"

    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )

    client: Mapped[Client | None] = relationship(lazy="selectin")


class FinancialGoal(IdMixin, TimestampMixin, Base):
    """A revenue target over a date range."""

    __tablename__ = "financial_goals"

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    target_amount: Mapped[float] = mapped_column(Float, nullable=False)
    current_amount: Mapped[float] = mapped_column(Float, default=0.0)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    achieved: Mapped[bool] = mapped_column(Boolean, default=False)
