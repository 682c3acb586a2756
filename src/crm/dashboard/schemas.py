"""Pydantic schemas for the dashboard summary."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from src.crm.schemas.common import ORMModel


class RecentClient(ORMModel):
    id: uuid.UUID
    name: str
    status: str
    last_contact: datetime


class RecentProperty(ORMModel):
    id: uuid.UUID
    title: str
    status: str
    price: float


class DashboardStats(BaseModel):
    total_clients: int
    total_properties: int
    recent_interactions: int
    recent_clients: list[RecentClient]
    recent_properties: list[RecentProperty]
