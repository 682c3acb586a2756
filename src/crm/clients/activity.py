"""Client activity log writer.

Every workflow mutation appends an Interaction describing it. The row is
added to the caller's session so it commits with the change it records.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.clients.models import Interaction


def add_interaction(
    session: AsyncSession,
    client_id: uuid.UUID,
    type: str,
    description: str,
    *,
    notes: str | None = None,
    stage_id: uuid.UUID | None = None,
    request_id: uuid.UUID | None = None,
    requirement_id: uuid.UUID | None = None,
    date: datetime | None = None,
) -> Interaction:
    """Add an activity log entry to the session (not committed)."""
    interaction = Interaction(
        client_id=client_id,
        type=type,
        description=description,
        notes=notes,
        stage_id=stage_id,
        request_id=request_id,
        requirement_id=requirement_id,
        date=date or datetime.now(timezone.utc),
    )
    session.add(interaction)
    return interaction
