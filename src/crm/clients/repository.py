"""Client repository -- async CRUD for clients and their activity log.

Provides ClientRepository and ChecklistRepository, both bound to a
request-scoped AsyncSession.

Mutations commit once at the end of the method, so the row and the
interaction describing it are written atomically. Reads that feed
serialized responses re-select with ``populate_existing`` so collections
reflect rows added earlier in the same session.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import Select, and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.crm.clients.activity import add_interaction
from src.crm.clients.models import ChecklistItem, Client, Document, Interaction
from src.crm.clients.schemas import (
    ClientCreate,
    ClientUpdate,
    ClientValidate,
    DocumentsCreate,
    InteractionCreate,
)
from src.crm.properties.models import SharedProperty
from src.crm.requirements.repository import build_requirement

logger = structlog.get_logger(__name__)


def _detail_query(client_id: uuid.UUID) -> Select:
    return (
        select(Client)
        .where(Client.id == client_id)
        .options(
            selectinload(Client.requirements),
            selectinload(Client.interactions),
            selectinload(Client.shared_properties).selectinload(SharedProperty.property),
            selectinload(Client.documents),
            selectinload(Client.checklist),
        )
        .execution_options(populate_existing=True)
    )


class ClientRepository:
    """Async CRUD for clients, interactions, documents and client checklists."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ── Clients ──────────────────────────────────────────────────────────

    async def list_clients(self) -> list[tuple[Client, Interaction | None]]:
        """All clients, pinned first then newest, each with its latest interaction."""
        result = await self._session.execute(
            select(Client)
            .options(selectinload(Client.requirements))
            .order_by(Client.pinned.desc(), Client.created_at.desc())
        )
        clients = list(result.scalars().all())

        latest = (
            select(Interaction.client_id, func.max(Interaction.date).label("latest_date"))
            .group_by(Interaction.client_id)
            .subquery()
        )
        rows = await self._session.execute(
            select(Interaction).join(
                latest,
                and_(
                    Interaction.client_id == latest.c.client_id,
                    Interaction.date == latest.c.latest_date,
                ),
            )
        )
        latest_by_client: dict[uuid.UUID, Interaction] = {}
        for interaction in rows.scalars():
            latest_by_client.setdefault(interaction.client_id, interaction)

        return [(client, latest_by_client.get(client.id)) for client in clients]

    async def find_duplicates(self, data: ClientValidate | ClientCreate) -> list[Client]:
        """Clients matching name or email (case-insensitive) or phone exactly."""
        conditions = []
        if data.name:
            conditions.append(func.lower(Client.name) == data.name.lower())
        if data.email:
            conditions.append(func.lower(Client.email) == str(data.email).lower())
        if data.phone:
            conditions.append(Client.phone == data.phone)
        if not conditions:
            return []
        result = await self._session.execute(select(Client).where(or_(*conditions)))
        return list(result.scalars().all())

    async def create_client(self, data: ClientCreate) -> Client:
        """Create a client with its initial requirement and a "Created" interaction."""
        client = Client(
            name=data.name,
            email=str(data.email) if data.email else None,
            phone=data.phone,
            status=data.status or "Active",
            notes=data.notes,
            pinned=False,
        )
        self._session.add(client)
        await self._session.flush()

        if data.requirements is not None:
            initial = data.requirements.model_copy(update={"name": "Initial Requirement"})
            self._session.add(build_requirement(initial, client_id=client.id))

        add_interaction(self._session, client.id, "Created", "Client profile created")
        await self._session.commit()

        logger.info("client_created", client_id=str(client.id), name=client.name)
        return await self.get_client_detail(client.id)

    async def get_client(self, client_id: uuid.UUID) -> Client | None:
        return await self._session.get(Client, client_id)

    async def get_client_detail(self, client_id: uuid.UUID) -> Client | None:
        result = await self._session.execute(_detail_query(client_id))
        return result.scalar_one_or_none()

    async def search_clients(self, q: str, limit: int = 5) -> list[Client]:
        """Name or email contains ``q`` (case-insensitive), sorted by name."""
        pattern = f"%{q.lower()}%"
        result = await self._session.execute(
            select(Client)
            .where(
                or_(
                    func.lower(Client.name).like(pattern),
                    func.lower(Client.email).like(pattern),
                )
            )
            .order_by(Client.name.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def update_client(self, client_id: uuid.UUID, data: ClientUpdate) -> Client | None:
        client = await self.get_client(client_id)
        if client is None:
            return None

        changes = data.model_dump(exclude_unset=True)
        if "email" in changes and changes["email"] is not None:
            changes["email"] = str(changes["email"])
        previous_status = client.status
        for field, value in changes.items():
            setattr(client, field, value)

        if "status" in changes and changes["status"] != previous_status:
            add_interaction(
                self._session,
                client.id,
                "Status Update",
                f"Status updated to {client.status}",
            )
        await self._session.commit()
        return await self.get_client_detail(client.id)

    async def delete_client(self, client_id: uuid.UUID) -> bool:
        """Delete a client; the database cascades to every child row."""
        result = await self._session.execute(delete(Client).where(Client.id == client_id))
        await self._session.commit()
        deleted = result.rowcount > 0
        if deleted:
            logger.info("client_deleted", client_id=str(client_id))
        return deleted

    async def touch(self, client_id: uuid.UUID) -> None:
        """Bump last_contact (not committed)."""
        client = await self.get_client(client_id)
        if client is not None:
            client.last_contact = datetime.now(timezone.utc)

    # ── Interactions ─────────────────────────────────────────────────────

    async def list_interactions(self, client_id: uuid.UUID) -> list[Interaction]:
        result = await self._session.execute(
            select(Interaction)
            .where(Interaction.client_id == client_id)
            .order_by(Interaction.date.desc())
        )
        return list(result.scalars().all())

    async def log_interaction(self, client_id: uuid.UUID, data: InteractionCreate) -> Interaction:
        """Record a manual interaction and update the client's last contact time."""
        interaction = add_interaction(
            self._session,
            client_id,
            data.type,
            data.description,
            notes=data.notes,
            date=data.date,
        )
        await self.touch(client_id)
        await self._session.commit()
        return interaction

    # ── Documents ────────────────────────────────────────────────────────

    async def list_documents(self, client_id: uuid.UUID) -> list[Document]:
        result = await self._session.execute(
            select(Document)
            .where(Document.client_id == client_id)
            .order_by(Document.created_at.desc())
        )
        return list(result.scalars().all())

    async def add_documents(self, client_id: uuid.UUID, data: DocumentsCreate) -> list[Document]:
        documents = [
            Document(
                client_id=client_id,
                stage_id=data.stage_id,
                name=doc.name,
                url=doc.url,
                type=doc.type,
            )
            for doc in data.documents
        ]
        self._session.add_all(documents)
        add_interaction(
            self._session,
            client_id,
            "Document",
            f"Uploaded {len(documents)} document(s)",
            stage_id=data.stage_id,
        )
        await self._session.commit()
        return documents

    async def delete_document(self, client_id: uuid.UUID, document_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            delete(Document).where(Document.id == document_id, Document.client_id == client_id)
        )
        await self._session.commit()
        return result.rowcount > 0


# ── Checklists ──────────────────────────────────────────────────────────────


class ChecklistRepository:
    """Checklist items for any owner (client, stage, request or requirement).

    ``owner`` is a single ``{column: id}`` mapping, e.g. ``{"stage_id": stage.id}``.
    """

    OWNER_COLUMNS = ("client_id", "stage_id", "request_id", "requirement_id")

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _owner_filter(self, owner: dict[str, uuid.UUID]):
        (column, owner_id), = owner.items()
        if column not in self.OWNER_COLUMNS:
            raise ValueError(f"Unknown checklist owner column: {column}")
        return getattr(ChecklistItem, column) == owner_id

    async def list_items(self, owner: dict[str, uuid.UUID]) -> list[ChecklistItem]:
        result = await self._session.execute(
            select(ChecklistItem)
            .where(self._owner_filter(owner))
            .order_by(ChecklistItem.created_at)
        )
        return list(result.scalars().all())

    async def add_item(self, owner: dict[str, uuid.UUID], text: str) -> ChecklistItem:
        """Add an item to the session (not committed)."""
        self._owner_filter(owner)
        item = ChecklistItem(text=text, completed=False, **owner)
        self._session.add(item)
        return item

    async def get_item(self, owner: dict[str, uuid.UUID], item_id: uuid.UUID) -> ChecklistItem | None:
        result = await self._session.execute(
            select(ChecklistItem).where(ChecklistItem.id == item_id, self._owner_filter(owner))
        )
        return result.scalar_one_or_none()

    async def update_item(
        self,
        owner: dict[str, uuid.UUID],
        item_id: uuid.UUID,
        text: str | None = None,
        completed: bool | None = None,
    ) -> ChecklistItem | None:
        item = await self.get_item(owner, item_id)
        if item is None:
            return None
        if text is not None:
            item.text = text
        if completed is not None:
            item.completed = completed
        await self._session.commit()
        return item

    async def delete_item(self, owner: dict[str, uuid.UUID], item_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            delete(ChecklistItem).where(ChecklistItem.id == item_id, self._owner_filter(owner))
        )
        await self._session.commit()
        return result.rowcount > 0

    async def commit(self) -> None:
        await self._session.commit()
