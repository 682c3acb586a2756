"""Pydantic schemas for commissions, transactions, goals and financial stats."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.crm.properties.schemas import ClientBrief
from src.crm.schemas.common import ORMModel


class CommissionStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


# ── Commissions ─────────────────────────────────────────────────────────────


class CommissionCreate(BaseModel):
    amount: float = Field(..., ge=0)
    percentage: float | None = Field(default=None, ge=0, le=100)
    due_date: datetime
    notes: str | None = None
    property_id: uuid.UUID
    client_id: uuid.UUID


class CommissionUpdate(BaseModel):
    """Partial update; moving to PAID stamps paid_date when not given."""

    amount: float | None = Field(default=None, ge=0)
    percentage: float | None = Field(default=None, ge=0, le=100)
    status: CommissionStatus | None = None
    due_date: datetime | None = None
    paid_date: datetime | None = None
    notes: str | None = None


class CommissionFilter(BaseModel):
    status: CommissionStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    min_amount: float | None = None
    max_amount: float | None = None


class PropertyBrief(ORMModel):
    id: uuid.UUID
    title: str
    address: str
    price: float
    status: str


class CommissionRead(ORMModel):
    id: uuid.UUID
    amount: float
    percentage: float | None = None
    status: str
    due_date: datetime
    paid_date: datetime | None = None
    notes: str | None = None
    property_id: uuid.UUID
    client_id: uuid.UUID
    created_at: datetime
    property: PropertyBrief
    client: ClientBrief


# ── Transactions ────────────────────────────────────────────────────────────


class TransactionCreate(BaseModel):
    type: TransactionType
    amount: float = Field(..., ge=0)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    date: datetime
    notes: str | None = None
    client_id: uuid.UUID | None = None


class TransactionUpdate(BaseModel):
    type: TransactionType | None = None
    amount: float | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, min_length=1)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    date: datetime | None = None
    notes: str | None = None
    client_id: uuid.UUID | None = None


class TransactionRead(ORMModel):
    id: uuid.UUID
    type: str
    amount: float
    description: str
    category: str
    date: datetime
    notes: str | None = None
    client_id: uuid.UUID | None = None
    created_at: datetime
    client: ClientBrief | None = None


class ClientPropertyBrief(BaseModel):
    """A property gathered for one of the client's requirements."""

    id: uuid.UUID
    title: str | None = None
    address: str | None = None
    price: float | None = None
    requirement_id: uuid.UUID


class TransactionsOverview(BaseModel):
    transactions: list[TransactionRead]
    total: int
    clients: list[ClientBrief]
    client_properties: list[ClientPropertyBrief] = Field(default_factory=list)


# ── Goals ───────────────────────────────────────────────────────────────────


class GoalCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    target_amount: float = Field(..., gt=0)
    current_amount: float = Field(default=0.0, ge=0)
    start_date: datetime | None = None
    end_date: datetime
    notes: str | None = None


class GoalUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    target_amount: float | None = Field(default=None, gt=0)
    current_amount: float | None = Field(default=None, ge=0)
    start_date: datetime | None = None
    end_date: datetime | None = None
    notes: str | None = None


class GoalRead(ORMModel):
    id: uuid.UUID
    title: str
    target_amount: float
    current_amount: float
    start_date: datetime
    end_date: datetime
    notes: str | None = None
    achieved: bool
    created_at: datetime


# ── Stats ───────────────────────────────────────────────────────────────────


class RecentTransaction(ORMModel):
    id: uuid.UUID
    date: datetime
    type: str
    amount: float
    description: str
    category: str


class TopProperty(BaseModel):
    id: uuid.UUID
    title: str
    commission: float
    status: str
    client_name: str


class FinancialStats(BaseModel):
    total_revenue: float
    total_commissions: float
    pending_commissions: float
    monthly_revenue: float
    monthly_growth: float
    active_deals: int
    recent_transactions: list[RecentTransaction]
    top_properties: list[TopProperty]
