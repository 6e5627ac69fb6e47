# app/utils/analytics.py
"""Loads the rows the pure budgeting functions need and runs them."""
import uuid
from datetime import date
from typing import List, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.crud.budget import get_budgets_for_periods
from app.crud.transaction import get_expenses_for_categories
from app.models.budget import Budget
from app.models.goal import Goal
from app.schemas.budget import BudgetSnapshot, BudgetTrend
from app.schemas.goal import GoalStatus
from app.utils.budgeting import (
    compute_snapshot,
    build_trend,
    goal_status,
    period_bounds,
    shift_month,
    trend_periods,
)


def _window(periods: Sequence[Tuple[int, int]], history_months: int = 0) -> Tuple[date, date]:
    """Date range covering every (year, month) in ``periods`` plus the history before the first."""
    first_year, first_month = shift_month(*min(periods), -history_months)
    start, _ = period_bounds(first_year, first_month)
    _, end = period_bounds(*max(periods))
    return start, end


async def snapshot_budgets(
    budgets: Sequence[Budget],
    user_id: uuid.UUID,
    today: date,
    db: AsyncSession,
    history_months: int = settings.BUDGET_HISTORY_MONTHS,
) -> List[Tuple[Budget, BudgetSnapshot]]:
    if not budgets:
        return []
    start, end = _window([(b.year, b.month) for b in budgets], history_months)
    expenses = await get_expenses_for_categories(user_id, [b.category_id for b in budgets], start, end, db)
    return [(b, compute_snapshot(b, expenses, today, history_months)) for b in budgets]


async def budget_trend(user_id: uuid.UUID, today: date, months: int, db: AsyncSession) -> BudgetTrend:
    periods = trend_periods(today, months)
    budgets = await get_budgets_for_periods(user_id, periods, db)
    start, end = _window(periods)
    expenses = await get_expenses_for_categories(user_id, {b.category_id for b in budgets}, start, end, db)
    return build_trend(budgets, expenses, today, months)


async def goal_statuses(goals: Sequence[Goal], user_id: uuid.UUID, db: AsyncSession) -> List[GoalStatus]:
    if not goals:
        return []
    start, end = _window([(g.year, g.month) for g in goals])
    expenses = await get_expenses_for_categories(user_id, [g.category_id for g in goals], start, end, db)
    statuses = [goal_status(g, expenses) for g in goals]
    return sorted(statuses, key=lambda s: s.percentage, reverse=True)
