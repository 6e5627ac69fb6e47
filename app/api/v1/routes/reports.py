# app/api/v1/routes/reports.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Literal, Optional, Tuple
from datetime import date

from app.schemas.report import ReportSummary, CategoryReport, MonthlyReport
from app.crud.transaction import get_transactions_in_range
from app.crud.budget import get_budgets_for_user
from app.core.clock import SystemClock, get_clock
from app.core.database import get_async_session
from app.core.auth import User
from app.api.deps import get_current_user
from app.utils.analytics import snapshot_budgets
from app.utils.budgeting import period_bounds
from app.utils.reports import (
    build_summary,
    build_category_report,
    build_monthly_report,
    previous_period,
    transactions_to_csv,
    budgets_to_csv,
)

router = APIRouter(prefix="/reports", tags=["reports"])


def _date_range(clock: SystemClock, start_date: Optional[date], end_date: Optional[date]) -> Tuple[date, date]:
    """Defaults to the current month; rejects inverted ranges."""
    today = clock.today()
    month_start, month_end = period_bounds(today.year, today.month)
    start_date = start_date or month_start
    end_date = end_date or month_end
    if end_date < start_date:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="end_date must be on or after start_date")
    return start_date, end_date


def _csv_response(content: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/summary", response_model=ReportSummary)
async def read_summary(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    """Income, expenses and balance for a period compared with the period just before it."""
    start_date, end_date = _date_range(clock, start_date, end_date)
    prev_start, prev_end = previous_period(start_date, end_date)
    current = await get_transactions_in_range(user.id, start_date, end_date, db)
    previous = await get_transactions_in_range(user.id, prev_start, prev_end, db)
    return build_summary(current, previous, start_date, end_date)

@router.get("/categories", response_model=CategoryReport)
async def read_category_report(
    type: Literal["income", "expense"] = Query("expense"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    start_date, end_date = _date_range(clock, start_date, end_date)
    transactions = await get_transactions_in_range(user.id, start_date, end_date, db, type=type)
    return build_category_report(transactions, type, start_date, end_date)

@router.get("/monthly", response_model=MonthlyReport)
async def read_monthly_report(
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    year = year or clock.today().year
    transactions = await get_transactions_in_range(user.id, date(year, 1, 1), date(year, 12, 31), db)
    return build_monthly_report(transactions, year)

@router.get("/export/transactions.csv")
async def export_transactions_csv(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    start_date, end_date = _date_range(clock, start_date, end_date)
    transactions = await get_transactions_in_range(user.id, start_date, end_date, db)
    return _csv_response(
        transactions_to_csv(transactions),
        f"transactions_{start_date.isoformat()}_{end_date.isoformat()}.csv",
    )

@router.get("/export/budgets.csv")
async def export_budgets_csv(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    budgets = await get_budgets_for_user(user.id, db, year=year, month=month)
    entries = await snapshot_budgets(budgets, user.id, clock.today(), db)
    return _csv_response(budgets_to_csv(entries), "budgets.csv")
