"""REST API endpoints for financial tracking.

Provides commissions (with client activity logging), income and expense
transactions, financial goals and the aggregated finance dashboard.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.crm.api.deps import get_db, require_auth
from src.crm.core.errors import NotFoundError
from src.crm.finances.models import Commission, FinancialGoal, Transaction
from src.crm.finances.repository import FinanceRepository
from src.crm.finances.schemas import (
    CommissionCreate,
    CommissionFilter,
    CommissionRead,
    CommissionStatus,
    CommissionUpdate,
    FinancialStats,
    GoalCreate,
    GoalRead,
    GoalUpdate,
    TransactionCreate,
    TransactionRead,
    TransactionsOverview,
    TransactionUpdate,
)
from src.crm.schemas.common import SuccessResponse

router = APIRouter(prefix="/api/v1/finances", tags=["finances"], dependencies=[require_auth])


async def get_commission_or_404(commission_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> Commission:
    commission = await FinanceRepository(db).get_commission(commission_id)
    if commission is None:
        raise NotFoundError("Commission")
    return commission


async def get_transaction_or_404(transaction_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> Transaction:
    transaction = await FinanceRepository(db).get_transaction(transaction_id)
    if transaction is None:
        raise NotFoundError("Transaction")
    return transaction


async def get_goal_or_404(goal_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> FinancialGoal:
    goal = await FinanceRepository(db).get_goal(goal_id)
    if goal is None:
        raise NotFoundError("Goal")
    return goal


# ── Commission Endpoints ─────────────────────────────────────────────────────


@router.get("/commissions", response_model=list[CommissionRead])
async def list_commissions(
    status: CommissionStatus | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    min_amount: float | None = None,
    max_amount: float | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Commissions ordered by due date; date filters apply to the due date."""
    criteria = CommissionFilter(
        status=status,
        start_date=start_date,
        end_date=end_date,
        min_amount=min_amount,
        max_amount=max_amount,
    )
    return await FinanceRepository(db).list_commissions(criteria)


@router.post("/commissions", response_model=CommissionRead, status_code=201)
async def create_commission(body: CommissionCreate, db: AsyncSession = Depends(get_db)):
    return await FinanceRepository(db).create_commission(body)


@router.get("/commissions/{commission_id}", response_model=CommissionRead)
async def get_commission(commission: Commission = Depends(get_commission_or_404)):
    return commission


@router.patch("/commissions/{commission_id}", response_model=CommissionRead)
async def update_commission(
    body: CommissionUpdate,
    commission: Commission = Depends(get_commission_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Partial update; marking PAID stamps the paid date."""
    return await FinanceRepository(db).update_commission(commission, body)


@router.delete("/commissions/{commission_id}", response_model=SuccessResponse)
async def delete_commission(
    commission: Commission = Depends(get_commission_or_404),
    db: AsyncSession = Depends(get_db),
):
    await FinanceRepository(db).delete_commission(commission)
    return SuccessResponse()


# ── Transaction Endpoints ────────────────────────────────────────────────────


@router.get("/transactions", response_model=TransactionsOverview)
async def list_transactions(client_id: uuid.UUID | None = None, db: AsyncSession = Depends(get_db)):
    """Transactions (optionally for one client) with the client pick list."""
    return await FinanceRepository(db).transactions_overview(client_id)


@router.post("/transactions", response_model=TransactionRead, status_code=201)
async def create_transaction(body: TransactionCreate, db: AsyncSession = Depends(get_db)):
    return await FinanceRepository(db).create_transaction(body)


@router.get("/transactions/{transaction_id}", response_model=TransactionRead)
async def get_transaction(transaction: Transaction = Depends(get_transaction_or_404)):
    return transaction


@router.patch("/transactions/{transaction_id}", response_model=TransactionRead)
async def update_transaction(
    body: TransactionUpdate,
    transaction: Transaction = Depends(get_transaction_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await FinanceRepository(db).update_transaction(transaction, body)


@router.delete("/transactions/{transaction_id}", response_model=SuccessResponse)
async def delete_transaction(
    transaction: Transaction = Depends(get_transaction_or_404),
    db: AsyncSession = Depends(get_db),
):
    await FinanceRepository(db).delete_transaction(transaction)
    return SuccessResponse()


# ── Goal Endpoints ───────────────────────────────────────────────────────────


@router.get("/goals", response_model=list[GoalRead])
async def list_goals(db: AsyncSession = Depends(get_db)):
    return await FinanceRepository(db).list_goals()


@router.post("/goals", response_model=GoalRead, status_code=201)
async def create_goal(body: GoalCreate, db: AsyncSession = Depends(get_db)):
    return await FinanceRepository(db).create_goal(body)


@router.get("/goals/{goal_id}", response_model=GoalRead)
async def get_goal(goal: FinancialGoal = Depends(get_goal_or_404)):
    return goal


@router.patch("/goals/{goal_id}", response_model=GoalRead)
async def update_goal(
    body: GoalUpdate,
    goal: FinancialGoal = Depends(get_goal_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await FinanceRepository(db).update_goal(goal, body)


@router.delete("/goals/{goal_id}", response_model=SuccessResponse)
async def delete_goal(goal: FinancialGoal = Depends(get_goal_or_404), db: AsyncSession = Depends(get_db)):
    await FinanceRepository(db).delete_goal(goal)
    return SuccessResponse()


# ── Stats Endpoint ───────────────────────────────────────────────────────────


@router.get("/stats", response_model=FinancialStats)
async def financial_stats(db: AsyncSession = Depends(get_db)):
    """Revenue, commissions, month-over-month growth and top deals."""
    return await FinanceRepository(db).stats()
