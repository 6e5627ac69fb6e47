# app/api/v1/routes/goals.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.schemas.goal import GoalCreate, GoalRead, GoalUpdate, GoalStatus, GoalInsights
from app.crud.goal import (
    create_goal_for_user,
    get_goals_for_user,
    get_goal_by_id,
    get_goal_for_category_period,
    update_goal,
    delete_goal,
)
from app.crud.category import get_category_by_id
from app.core.clock import SystemClock, get_clock
from app.core.database import get_async_session
from app.core.auth import User
from app.api.deps import get_current_user
from app.utils.analytics import goal_statuses
from app.utils.budgeting import build_goal_insights

router = APIRouter(prefix="/goals", tags=["goals"])

@router.get("", response_model=List[GoalRead])
async def read_goals(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    category_id: Optional[uuid.UUID] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_goals_for_user(user.id, db, month=month, year=year, category_id=category_id)

@router.get("/status", response_model=List[GoalStatus])
async def read_goal_status(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    """
    Spending against each goal of a month (current month by default).

    Status is **OnTrack** below 80%, **Warning** from 80% and **Exceeded** from 100%.
    """
    today = clock.today()
    goals = await get_goals_for_user(user.id, db, month=month or today.month, year=year or today.year)
    return await goal_statuses(goals, user.id, db)

@router.get("/insights", response_model=GoalInsights)
async def read_goal_insights(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    category_id: Optional[uuid.UUID] = Query(None),
    risk_threshold: float = Query(80.0, gt=0, le=100),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    """Completed, overdue and at-risk goals."""
    goals = await get_goals_for_user(user.id, db, month=month, year=year, category_id=category_id)
    statuses = await goal_statuses(goals, user.id, db)
    return build_goal_insights(statuses, clock.today(), risk_threshold)

@router.post("", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_in: GoalCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    if not await get_category_by_id(goal_in.category_id, user.id, db):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Category not found")
    if await get_goal_for_category_period(user.id, goal_in.category_id, goal_in.month, goal_in.year, db):
        raise HTTPException(status.HTTP_409_CONFLICT, detail="A goal for this category and period already exists")
    return await create_goal_for_user(user.id, goal_in, db)

@router.get("/{goal_id}", response_model=GoalRead)
async def read_goal(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_by_id(goal_id, user.id, db)
    if not goal:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Goal not found")
    return goal

@router.patch("/{goal_id}", response_model=GoalRead)
async def update_goal_endpoint(
    goal_id: uuid.UUID,
    goal_in: GoalUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_by_id(goal_id, user.id, db)
    if not goal:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Goal not found")
    return await update_goal(goal, goal_in, db)

@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal_endpoint(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await get_goal_by_id(goal_id, user.id, db)
    if not goal:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Goal not found")
    await delete_goal(goal, db)
