"""Dashboard queries -- headline counts and recent activity."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.clients.models import Client, Interaction
from src.crm.properties.models import Property

RECENT_ACTIVITY_WINDOW = timedelta(days=30)
RECENT_LIMIT = 5


class DashboardRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def stats(self) -> dict:
        """Counts plus the five most recently contacted clients and newest listings."""
        since = datetime.now(timezone.utc) - RECENT_ACTIVITY_WINDOW

        total_clients = await self._session.scalar(select(func.count(Client.id)))
        total_properties = await self._session.scalar(select(func.count(Property.id)))
        recent_interactions = await self._session.scalar(
            select(func.count(Interaction.id)).where(Interaction.date >= since)
        )
        clients = await self._session.execute(
            select(Client).order_by(Client.last_contact.desc()).limit(RECENT_LIMIT)
        )
        properties = await self._session.execute(
            select(Property).order_by(Property.created_at.desc()).limit(RECENT_LIMIT)
        )
        return {
            "total_clients": total_clients or 0,
            "total_properties": total_properties or 0,
            "recent_interactions": recent_interactions or 0,
            "recent_clients": list(clients.scalars().all()),
            "recent_properties": list(properties.scalars().all()),
        }
