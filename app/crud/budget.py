# app/crud/budget.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import update, or_, and_
from app.models.budget import Budget, ALERT_THRESHOLDS
from typing import Iterable, List, Optional, Tuple
import uuid
from app.schemas.budget import BudgetCreate, BudgetUpdate

async def get_budgets_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> List[Budget]:
    query = select(Budget).where(Budget.user_id == user_id)
    if year is not None:
        query = query.where(Budget.year == year)
    if month is not None:
        query = query.where(Budget.month == month)
    result = await db.execute(query.order_by(Budget.year.desc(), Budget.month.desc(), Budget.created_at))
    return result.scalars().all()

async def get_budgets_for_periods(
    user_id: uuid.UUID,
    periods: Iterable[Tuple[int, int]],
    db: AsyncSession,
) -> List[Budget]:
    """Budgets of a user whose (year, month) is in ``periods``."""
    clauses = [and_(Budget.year == y, Budget.month == m) for y, m in periods]
    if not clauses:
        return []
    result = await db.execute(select(Budget).where(Budget.user_id == user_id, or_(*clauses)))
    return result.scalars().all()

async def get_budget_by_id(budget_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Budget]:
    result = await db.execute(
        select(Budget).where(Budget.id == budget_id, Budget.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def get_budget_for_category_period(
    user_id: uuid.UUID,
    category_id: uuid.UUID,
    month: int,
    year: int,
    db: AsyncSession,
) -> Optional[Budget]:
    result = await db.execute(
        select(Budget).where(
            Budget.user_id == user_id,
            Budget.category_id == category_id,
            Budget.month == month,
            Budget.year == year,
        )
    )
    return result.scalar_one_or_none()

async def create_budget_for_user(user_id: uuid.UUID, budget_in: BudgetCreate, db: AsyncSession) -> Budget:
    new_budget = Budget(**budget_in.model_dump(), user_id=user_id)
    db.add(new_budget)
    await db.commit()
    await db.refresh(new_budget)
    await db.refresh(new_budget, attribute_names=["category"])
    return new_budget

async def update_budget(budget: Budget, budget_in: BudgetUpdate, db: AsyncSession) -> Budget:
    for field, value in budget_in.model_dump(exclude_unset=True).items():
        setattr(budget, field, value)
    db.add(budget)
    await db.commit()
    await db.refresh(budget)
    return budget

async def delete_budget(budget: Budget, db: AsyncSession) -> None:
    await db.delete(budget)
    await db.commit()


# ────────────────────────────────────────────────────────────────────────────────
# ALERT WORKER
# ────────────────────────────────────────────────────────────────────────────────
async def get_budgets_for_period(month: int, year: int, db: AsyncSession) -> List[Budget]:
    """Budgets of every user for one period."""
    result = await db.execute(
        select(Budget)
        .where(Budget.month == month, Budget.year == year)
        .order_by(Budget.user_id, Budget.created_at)
    )
    return result.scalars().all()

async def mark_alert_sent(budget_id: uuid.UUID, threshold: int, db: AsyncSession) -> bool:
    """
    Set ``alert_<threshold>_sent`` if it is still unset.

    Returns False when another worker already set it. Does not commit.
    """
    if threshold not in ALERT_THRESHOLDS:
        raise ValueError(f"Unknown alert threshold: {threshold}")
    flag = getattr(Budget, f"alert_{threshold}_sent")
    result = await db.execute(
        update(Budget)
        .where(Budget.id == budget_id, flag == False)  # noqa: E712
        .values({flag.key: True})
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
