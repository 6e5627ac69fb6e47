# app/crud/goal.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.models.goal import Goal
from typing import List, Optional
import uuid
from app.schemas.goal import GoalCreate, GoalUpdate

async def get_goals_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    month: Optional[int] = None,
    year: Optional[int] = None,
    category_id: Optional[uuid.UUID] = None,
) -> List[Goal]:
    query = select(Goal).where(Goal.user_id == user_id)
    if month is not None:
        query = query.where(Goal.month == month)
    if year is not None:
        query = query.where(Goal.year == year)
    if category_id is not None:
        query = query.where(Goal.category_id == category_id)
    result = await db.execute(query.order_by(Goal.year.desc(), Goal.month.desc()))
    return result.scalars().all()

async def get_goal_by_id(goal_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Goal]:
    result = await db.execute(
        select(Goal).where(Goal.id == goal_id, Goal.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def get_goal_for_category_period(
    user_id: uuid.UUID,
    category_id: uuid.UUID,
    month: int,
    year: int,
    db: AsyncSession,
) -> Optional[Goal]:
    result = await db.execute(
        select(Goal).where(
            Goal.user_id == user_id,
            Goal.category_id == category_id,
            Goal.month == month,
            Goal.year == year,
        )
    )
    return result.scalar_one_or_none()

async def create_goal_for_user(user_id: uuid.UUID, goal_in: GoalCreate, db: AsyncSession) -> Goal:
    new_goal = Goal(**goal_in.model_dump(), user_id=user_id)
    db.add(new_goal)
    await db.commit()
    await db.refresh(new_goal)
    await db.refresh(new_goal, attribute_names=["category"])
    return new_goal

async def update_goal(goal: Goal, goal_in: GoalUpdate, db: AsyncSession) -> Goal:
    for field, value in goal_in.model_dump(exclude_unset=True).items():
        setattr(goal, field, value)
    db.add(goal)
    await db.commit()
    await db.refresh(goal)
    return goal

async def delete_goal(goal: Goal, db: AsyncSession) -> None:
    await db.delete(goal)
    await db.commit()
