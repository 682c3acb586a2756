"""Dashboard endpoint -- headline counts and recent activity."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.api.deps import get_db, require_auth
from src.crm.dashboard.repository import DashboardRepository
from src.crm.dashboard.schemas import DashboardStats

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"], dependencies=[require_auth])


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(db: AsyncSession = Depends(get_db)):
    return await DashboardRepository(db).stats()
