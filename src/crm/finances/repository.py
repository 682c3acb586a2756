"""Finance repository -- commissions, transactions, goals and aggregate stats.

Commission and client-linked transaction changes are mirrored into the
client's activity log in the same commit.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.clients.activity import add_interaction
from src.crm.clients.models import Client
from src.crm.core.errors import NotFoundError
from src.crm.finances.models import Commission, FinancialGoal, Transaction
from src.crm.finances.schemas import (
    CommissionCreate,
    CommissionFilter,
    CommissionStatus,
    CommissionUpdate,
    GoalCreate,
    GoalUpdate,
    TransactionCreate,
    TransactionType,
    TransactionUpdate,
)
from src.crm.properties.models import Property
from src.crm.requirements.models import GatheredProperty, Requirement

logger = structlog.get_logger(__name__)


def _money(amount: float) -> str:
    return f"${amount:,.2f}"


def _month_start(moment: datetime, months_back: int = 0) -> datetime:
    year, month = moment.year, moment.month - months_back
    while month < 1:
        month += 12
        year -= 1
    return datetime(year, month, 1, tzinfo=timezone.utc)


class FinanceRepository:
    """Async CRUD for the agent's books."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _require(self, model, entity_id: uuid.UUID, label: str):
        row = await self._session.get(model, entity_id)
        if row is None:
            raise NotFoundError(label)
        return row

    # ── Commissions ──────────────────────────────────────────────────────

    async def list_commissions(self, criteria: CommissionFilter) -> list[Commission]:
        stmt = select(Commission)
        if criteria.status:
            stmt = stmt.where(Commission.status == criteria.status.value)
        if criteria.start_date:
            stmt = stmt.where(Commission.due_date >= criteria.start_date)
        if criteria.end_date:
            stmt = stmt.where(Commission.due_date <= criteria.end_date)
        if criteria.min_amount is not None:
            stmt = stmt.where(Commission.amount >= criteria.min_amount)
        if criteria.max_amount is not None:
            stmt = stmt.where(Commission.amount <= criteria.max_amount)
        result = await self._session.execute(stmt.order_by(Commission.due_date.asc()))
        return list(result.scalars().all())

    async def get_commission(self, commission_id: uuid.UUID) -> Commission | None:
        return await self._session.get(Commission, commission_id)

    async def _reload_commission(self, commission_id: uuid.UUID) -> Commission:
        result = await self._session.execute(
            select(Commission)
            .where(Commission.id == commission_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def create_commission(self, data: CommissionCreate) -> Commission:
        """Record a PENDING commission and note it on the client.

        Raises:
            NotFoundError: If the property or client does not exist.
        """
        prop = await self._require(Property, data.property_id, "Property")
        await self._require(Client, data.client_id, "Client")

        commission = Commission(status=CommissionStatus.PENDING.value, **data.model_dump())
        self._session.add(commission)
        add_interaction(
            self._session,
            data.client_id,
            "Commission",
            f"Commission of {_money(data.amount)} set for {prop.title}",
        )
        await self._session.commit()
        logger.info("commission_created", commission_id=str(commission.id), amount=data.amount)
        return await self._reload_commission(commission.id)

    async def update_commission(self, commission: Commission, data: CommissionUpdate) -> Commission:
        changes = data.model_dump(exclude_unset=True)
        if changes.get("status") is not None:
            changes["status"] = data.status.value
        for field, value in changes.items():
            if value is not None or field in ("percentage", "paid_date", "notes"):
                setattr(commission, field, value)
        if commission.status == CommissionStatus.PAID.value and commission.paid_date is None:
            commission.paid_date = datetime.now(timezone.utc)

        add_interaction(
            self._session,
            commission.client_id,
            "Commission",
            f"Commission updated: {_money(commission.amount)} for {commission.property.title}",
        )
        await self._session.commit()
        return await self._reload_commission(commission.id)

    async def delete_commission(self, commission: Commission) -> None:
        add_interaction(
            self._session,
            commission.client_id,
            "Commission",
            f"Commission of {_money(commission.amount)} for {commission.property.title} deleted",
        )
        await self._session.execute(delete(Commission).where(Commission.id == commission.id))
        await self._session.commit()

    # ── Transactions ─────────────────────────────────────────────────────

    async def transactions_overview(self, client_id: uuid.UUID | None = None) -> dict:
        """Transactions (newest first) plus the pickers the ledger form needs."""
        stmt = select(Transaction).order_by(Transaction.date.desc())
        if client_id is not None:
            stmt = stmt.where(Transaction.client_id == client_id)
        transactions = list((await self._session.execute(stmt)).scalars().all())

        clients = list(
            (await self._session.execute(select(Client).order_by(Client.name.asc()))).scalars().all()
        )

        client_properties = []
        if client_id is not None:
            gathered = await self._session.execute(
                select(GatheredProperty)
                .join(Requirement, GatheredProperty.requirement_id == Requirement.id)
                .where(Requirement.client_id == client_id)
                .order_by(GatheredProperty.created_at.desc())
            )
            client_properties = [
                {
                    "id": g.id,
                    "title": g.title,
                    "address": g.address,
                    "price": g.price,
                    "requirement_id": g.requirement_id,
                }
                for g in gathered.scalars().all()
            ]

        return {
            "transactions": transactions,
            "total": len(transactions),
            "clients": clients,
            "client_properties": client_properties,
        }

    async def get_transaction(self, transaction_id: uuid.UUID) -> Transaction | None:
        return await self._session.get(Transaction, transaction_id)

    async def _reload_transaction(self, transaction_id: uuid.UUID) -> Transaction:
        result = await self._session.execute(
            select(Transaction)
            .where(Transaction.id == transaction_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def create_transaction(self, data: TransactionCreate) -> Transaction:
        if data.client_id is not None:
            await self._require(Client, data.client_id, "Client")
        transaction = Transaction(**{**data.model_dump(), "type": data.type.value})
        self._session.add(transaction)
        if data.client_id is not None:
            add_interaction(
                self._session,
                data.client_id,
                "Financial",
                f"Transaction recorded: {data.description}",
            )
        await self._session.commit()
        return await self._reload_transaction(transaction.id)

    async def update_transaction(self, transaction: Transaction, data: TransactionUpdate) -> Transaction:
        changes = data.model_dump(exclude_unset=True)
        if changes.get("type") is not None:
            changes["type"] = data.type.value
        if changes.get("client_id") is not None:
            await self._require(Client, changes["client_id"], "Client")
        for field, value in changes.items():
            if value is not None or field in ("notes", "client_id"):
                setattr(transaction, field, value)

        if transaction.client_id is not None:
            add_interaction(
                self._session,
                transaction.client_id,
                "Financial",
                f"Transaction updated: {transaction.description}",
            )
        await self._session.commit()
        return await self._reload_transaction(transaction.id)

    async def delete_transaction(self, transaction: Transaction) -> None:
        if transaction.client_id is not None:
            add_interaction(
                self._session,
                transaction.client_id,
                "Financial",
                f"Transaction deleted: {transaction.description}",
            )
        await self._session.execute(delete(Transaction).where(Transaction.id == transaction.id))
        await self._session.commit()

    # ── Goals ────────────────────────────────────────────────────────────

    async def list_goals(self) -> list[FinancialGoal]:
        result = await self._session.execute(select(FinancialGoal).order_by(FinancialGoal.end_date.asc()))
        return list(result.scalars().all())

    async def get_goal(self, goal_id: uuid.UUID) -> FinancialGoal | None:
        return await self._session.get(FinancialGoal, goal_id)

    async def create_goal(self, data: GoalCreate) -> FinancialGoal:
        values = data.model_dump()
        if values["start_date"] is None:
            values["start_date"] = datetime.now(timezone.utc)
        goal = FinancialGoal(**values)
        goal.achieved = goal.current_amount >= goal.target_amount
        self._session.add(goal)
        await self._session.commit()
        return goal

    async def update_goal(self, goal: FinancialGoal, data: GoalUpdate) -> FinancialGoal:
        """Partial update; ``achieved`` is recomputed from the amounts."""
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None or field == "notes":
                setattr(goal, field, value)
        goal.achieved = goal.current_amount >= goal.target_amount
        await self._session.commit()
        return goal

    async def delete_goal(self, goal: FinancialGoal) -> None:
        await self._session.execute(delete(FinancialGoal).where(FinancialGoal.id == goal.id))
        await self._session.commit()

    # ── Stats ────────────────────────────────────────────────────────────

    async def _income_between(self, start: datetime | None = None, end: datetime | None = None) -> float:
        stmt = select(func.coalesce(func.sum(Transaction.amount), 0.0)).where(
            Transaction.type == TransactionType.INCOME.value
        )
        if start is not None:
            stmt = stmt.where(Transaction.date >= start)
        if end is not None:
            stmt = stmt.where(Transaction.date < end)
        return float(await self._session.scalar(stmt))

    async def stats(self, now: datetime | None = None) -> dict:
        """Revenue, commission totals, month-over-month growth and top deals."""
        now = now or datetime.now(timezone.utc)
        this_month = _month_start(now)
        last_month = _month_start(now, months_back=1)

        total_revenue = await self._income_between()
        monthly_revenue = await self._income_between(start=this_month)
        last_month_revenue = await self._income_between(start=last_month, end=this_month)
        if last_month_revenue == 0:
            monthly_growth = 100.0
        else:
            monthly_growth = (monthly_revenue - last_month_revenue) / last_month_revenue * 100

        total_commissions = await self._session.scalar(
            select(func.coalesce(func.sum(Commission.amount), 0.0))
        )
        pending_commissions = await self._session.scalar(
            select(func.coalesce(func.sum(Commission.amount), 0.0)).where(
                Commission.status == CommissionStatus.PENDING.value
            )
        )
        active_deals = await self._session.scalar(
            select(func.count(Commission.id)).where(Commission.status == CommissionStatus.PENDING.value)
        )

        recent = await self._session.execute(select(Transaction).order_by(Transaction.date.desc()).limit(5))
        top = await self._session.execute(select(Commission).order_by(Commission.amount.desc()).limit(5))

        return {
            "total_revenue": total_revenue,
            "total_commissions": float(total_commissions),
            "pending_commissions": float(pending_commissions),
            "monthly_revenue": monthly_revenue,
            "monthly_growth": round(monthly_growth, 2),
            "active_deals": int(active_deals or 0),
            "recent_transactions": list(recent.scalars().all()),
            "top_properties": [
                {
                    "id": c.id,
                    "title": c.property.title if c.property else "Unnamed Property",
                    "commission": c.amount,
                    "status": c.status,
                    "client_name": c.client.name if c.client else "Unknown Client",
                }
                for c in top.scalars().all()
            ],
        }
