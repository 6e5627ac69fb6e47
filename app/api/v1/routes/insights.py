# app/api/v1/routes/insights.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import date
import uuid
import logging

from app.schemas.insight import FinancialInsight
from app.crud.transaction import get_transactions_in_range
from app.crud.budget import get_budgets_for_user
from app.core.clock import SystemClock, get_clock
from app.core.database import get_async_session
from app.core.auth import User
from app.api.deps import get_current_user
from app.utils.analytics import snapshot_budgets
from app.utils.insights import generate_insights, insight_periods

router = APIRouter(prefix="/insights", tags=["insights"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[FinancialInsight])
async def read_insights(
    start_date: Optional[date] = Query(None, description="Defaults to the first day of the month three months back"),
    end_date: Optional[date] = Query(None, description="Defaults to today"),
    category_id: Optional[uuid.UUID] = Query(None),
    include_income: bool = Query(True),
    include_expense: bool = Query(True),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    """
    Spending and income insights for the current period.

    - **spending_pattern**: a category well above its usual month, or an overall pace above normal
    - **budget_risk**: a budget used faster than the month is passing
    - **income_pattern**: income moving away from its recent average
    """
    if start_date and end_date and end_date < start_date:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="end_date must be on or after start_date")

    history_start, current_start, end = insight_periods(clock.today(), start_date, end_date)
    transactions = await get_transactions_in_range(user.id, history_start, end, db)
    budgets = await get_budgets_for_user(user.id, db, year=current_start.year, month=current_start.month)
    entries = await snapshot_budgets(budgets, user.id, end, db)

    insights = generate_insights(
        transactions,
        entries,
        current_start,
        end,
        clock.now(),
        category_id=category_id,
        include_income=include_income,
        include_expense=include_expense,
    )
    logger.info(f"💡 {len(insights)} insights for user {user.id} ({current_start} to {end})")
    return insights
