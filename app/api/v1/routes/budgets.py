# app/api/v1/routes/budgets.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.schemas.budget import (
    BudgetCreate,
    BudgetRead,
    BudgetUpdate,
    BudgetOverview,
    BudgetTrend,
    BudgetSummary,
    BudgetSnapshot,
)
from app.crud.budget import (
    create_budget_for_user,
    get_budgets_for_user,
    get_budget_by_id,
    get_budget_for_category_period,
    update_budget,
    delete_budget,
)
from app.crud.category import get_category_by_id
from app.core.clock import SystemClock, get_clock
from app.core.database import get_async_session
from app.core.auth import User
from app.api.deps import get_current_user
from app.models.budget import Budget
from app.utils.analytics import snapshot_budgets, budget_trend
from app.utils.budgeting import build_overview, percentage_used

router = APIRouter(prefix="/budgets", tags=["budgets"])


def _to_read(budget: Budget, snapshot: BudgetSnapshot) -> BudgetRead:
    read = BudgetRead.model_validate(budget)
    read.snapshot = snapshot
    return read


async def _with_snapshots(budgets, user: User, db: AsyncSession, clock: SystemClock) -> List[BudgetRead]:
    entries = await snapshot_budgets(budgets, user.id, clock.today(), db)
    return [_to_read(b, s) for b, s in entries]


async def _get_owned(budget_id: uuid.UUID, user: User, db: AsyncSession) -> Budget:
    budget = await get_budget_by_id(budget_id, user.id, db)
    if not budget:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Budget not found")
    return budget


def _resolve_period(clock: SystemClock, month: Optional[int], year: Optional[int]):
    today = clock.today()
    return month or today.month, year or today.year


@router.get("", response_model=List[BudgetRead])
async def read_budgets(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    budgets = await get_budgets_for_user(user.id, db, year=year, month=month)
    return await _with_snapshots(budgets, user, db, clock)

@router.get("/current", response_model=List[BudgetRead])
async def read_current_budgets(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    today = clock.today()
    budgets = await get_budgets_for_user(user.id, db, year=today.year, month=today.month)
    return await _with_snapshots(budgets, user, db, clock)

@router.get("/overview", response_model=BudgetOverview)
async def read_budget_overview(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    """Totals, at-risk and comfortable categories, and how much could be reallocated."""
    month, year = _resolve_period(clock, month, year)
    budgets = await get_budgets_for_user(user.id, db, year=year, month=month)
    entries = await snapshot_budgets(budgets, user.id, clock.today(), db)
    return build_overview(entries, month, year)

@router.get("/trend", response_model=BudgetTrend)
async def read_budget_trend(
    months: int = Query(6, ge=1, le=24),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    return await budget_trend(user.id, clock.today(), months, db)

@router.get("/summary", response_model=BudgetSummary)
async def read_budget_summary(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    month, year = _resolve_period(clock, month, year)
    budgets = await get_budgets_for_user(user.id, db, year=year, month=month)
    entries = await snapshot_budgets(budgets, user.id, clock.today(), db, history_months=0)
    total_budget = sum(float(b.amount) for b, _ in entries)
    total_spent = sum(s.spent for _, s in entries)
    return BudgetSummary(
        month=month,
        year=year,
        total_budget=round(total_budget, 2),
        total_spent=round(total_spent, 2),
        total_remaining=round(total_budget - total_spent, 2),
        percentage_used=percentage_used(total_spent, total_budget),
        budgets_count=len(entries),
    )

@router.get("/category/{category_id}", response_model=BudgetRead)
async def read_budget_for_category(
    category_id: uuid.UUID,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    month, year = _resolve_period(clock, month, year)
    budget = await get_budget_for_category_period(user.id, category_id, month, year, db)
    if not budget:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Budget not found")
    return (await _with_snapshots([budget], user, db, clock))[0]

@router.post("", response_model=BudgetRead, status_code=status.HTTP_201_CREATED)
async def create_budget(
    budget_in: BudgetCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    if not await get_category_by_id(budget_in.category_id, user.id, db):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Category not found")
    if await get_budget_for_category_period(user.id, budget_in.category_id, budget_in.month, budget_in.year, db):
        raise HTTPException(status.HTTP_409_CONFLICT, detail="A budget for this category and period already exists")
    budget = await create_budget_for_user(user.id, budget_in, db)
    return (await _with_snapshots([budget], user, db, clock))[0]

@router.get("/{budget_id}", response_model=BudgetRead)
async def read_budget(
    budget_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    budget = await _get_owned(budget_id, user, db)
    return (await _with_snapshots([budget], user, db, clock))[0]

@router.patch("/{budget_id}", response_model=BudgetRead)
async def update_budget_endpoint(
    budget_id: uuid.UUID,
    budget_in: BudgetUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    budget = await update_budget(await _get_owned(budget_id, user, db), budget_in, db)
    return (await _with_snapshots([budget], user, db, clock))[0]

@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget_endpoint(
    budget_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    await delete_budget(await _get_owned(budget_id, user, db), db)
