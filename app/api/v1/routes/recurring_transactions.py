# app/api/v1/routes/recurring_transactions.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid
import logging

from app.schemas.recurring_transaction import (
    RecurringTransactionCreate,
    RecurringTransactionRead,
    RecurringTransactionUpdate,
)
from app.crud.recurring_transaction import (
    create_recurring_for_user,
    get_recurring_for_user,
    get_recurring_by_id,
    update_recurring,
    delete_recurring,
)
from app.crud.category import get_category_by_id
from app.core.clock import SystemClock, get_clock
from app.core.database import get_async_session
from app.core.auth import User
from app.api.deps import get_current_user
from app.models.recurring_transaction import RecurringTransaction
from app.utils.recurrence import next_occurrence

router = APIRouter(prefix="/recurring-transactions", tags=["recurring transactions"])
logger = logging.getLogger(__name__)


def _to_read(rec: RecurringTransaction, clock: SystemClock) -> RecurringTransactionRead:
    read = RecurringTransactionRead.model_validate(rec)
    read.next_generation_date = next_occurrence(rec, clock.today())
    return read


async def _get_owned(recurring_id: uuid.UUID, user: User, db: AsyncSession) -> RecurringTransaction:
    rec = await get_recurring_by_id(recurring_id, user.id, db)
    if not rec:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Recurring transaction not found")
    return rec


@router.get("", response_model=List[RecurringTransactionRead])
async def read_recurring_transactions(
    is_active: Optional[bool] = Query(None, description="Filter by active state"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    return [_to_read(rec, clock) for rec in await get_recurring_for_user(user.id, db, is_active=is_active)]

@router.post("", response_model=RecurringTransactionRead, status_code=status.HTTP_201_CREATED)
async def create_recurring_transaction(
    rec_in: RecurringTransactionCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    if not await get_category_by_id(rec_in.category_id, user.id, db):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Category not found")
    rec = await create_recurring_for_user(user.id, rec_in, db)
    logger.info(f"Recurring {rec.frequency} transaction {rec.id} created for user {user.id}")
    return _to_read(rec, clock)

@router.get("/{recurring_id}", response_model=RecurringTransactionRead)
async def read_recurring_transaction(
    recurring_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    return _to_read(await _get_owned(recurring_id, user, db), clock)

@router.patch("/{recurring_id}", response_model=RecurringTransactionRead)
async def update_recurring_transaction(
    recurring_id: uuid.UUID,
    rec_in: RecurringTransactionUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    rec = await _get_owned(recurring_id, user, db)
    if rec_in.end_date is not None and rec_in.end_date < rec.start_date:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail="end_date must be on or after start_date")
    return _to_read(await update_recurring(rec, rec_in, db, today=clock.today()), clock)

@router.post("/{recurring_id}/toggle", response_model=RecurringTransactionRead)
async def toggle_recurring_transaction(
    recurring_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    clock: SystemClock = Depends(get_clock),
):
    """
    Pause or resume generation for a definition.

    Dates that fall due while a definition is paused are never generated.
    """
    rec = await _get_owned(recurring_id, user, db)
    updated = await update_recurring(
        rec, RecurringTransactionUpdate(is_active=not rec.is_active), db, today=clock.today()
    )
    logger.info(f"Recurring transaction {rec.id} {'resumed' if updated.is_active else 'paused'}")
    return _to_read(updated, clock)

@router.delete("/{recurring_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recurring_transaction(
    recurring_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Delete a definition; transactions it already generated are kept."""
    await delete_recurring(await _get_owned(recurring_id, user, db), db)
