# app/crud/recurring_transaction.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import update, or_
from app.models.recurring_transaction import RecurringTransaction
from typing import List, Optional
from datetime import date, timedelta
import uuid
from app.schemas.recurring_transaction import RecurringTransactionCreate, RecurringTransactionUpdate

async def get_recurring_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    is_active: Optional[bool] = None,
) -> List[RecurringTransaction]:
    query = select(RecurringTransaction).where(RecurringTransaction.user_id == user_id)
    if is_active is not None:
        query = query.where(RecurringTransaction.is_active == is_active)
    result = await db.execute(query.order_by(RecurringTransaction.start_date))
    return result.scalars().all()

async def get_recurring_by_id(recurring_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[RecurringTransaction]:
    result = await db.execute(
        select(RecurringTransaction).where(
            RecurringTransaction.id == recurring_id,
            RecurringTransaction.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()

async def create_recurring_for_user(
    user_id: uuid.UUID,
    rec_in: RecurringTransactionCreate,
    db: AsyncSession,
) -> RecurringTransaction:
    data = rec_in.model_dump()
    # Only the field matching the frequency is meaningful
    if data["frequency"] != "monthly":
        data["day_of_month"] = None
    if data["frequency"] != "weekly":
        data["day_of_week"] = None

    new_rec = RecurringTransaction(**data, user_id=user_id, is_active=True)
    db.add(new_rec)
    await db.commit()
    await db.refresh(new_rec)
    await db.refresh(new_rec, attribute_names=["category"])
    return new_rec

async def update_recurring(
    rec: RecurringTransaction,
    rec_in: RecurringTransactionUpdate,
    db: AsyncSession,
    today: Optional[date] = None,
) -> RecurringTransaction:
    """
    Apply a partial update. When ``today`` is given and the definition is
    being resumed, occurrences that fell due while it was paused are skipped
    by moving the watermark to the day before ``today``.
    """
    data = rec_in.model_dump(exclude_unset=True)
    resuming = data.get("is_active") is True and not rec.is_active
    for field, value in data.items():
        setattr(rec, field, value)

    if resuming and today is not None:
        paused_through = today - timedelta(days=1)
        if paused_through >= rec.start_date and (
            rec.last_generated_date is None or rec.last_generated_date < paused_through
        ):
            rec.last_generated_date = paused_through
    db.add(rec)
    await db.commit()
    await db.refresh(rec)
    return rec

async def delete_recurring(rec: RecurringTransaction, db: AsyncSession) -> None:
    await db.delete(rec)
    await db.commit()


# ────────────────────────────────────────────────────────────────────────────────
# SCHEDULER
# ────────────────────────────────────────────────────────────────────────────────
async def get_generatable_definitions(today: date, db: AsyncSession) -> List[RecurringTransaction]:
    """Active, unfinished definitions across all users that may have occurrences up to ``today``."""
    result = await db.execute(
        select(RecurringTransaction)
        .where(
            RecurringTransaction.is_active == True,  # noqa: E712
            RecurringTransaction.start_date <= today,
            or_(
                RecurringTransaction.end_date.is_(None),
                RecurringTransaction.end_date >= today,
            ),
        )
        .order_by(RecurringTransaction.created_at)
    )
    return result.scalars().all()

async def advance_watermark(recurring_id: uuid.UUID, occurrence: date, db: AsyncSession) -> bool:
    """
    Move ``last_generated_date`` forward to ``occurrence``.

    Conditional on the stored watermark still being older, so two workers
    racing on the same definition cannot both claim a date. Returns False
    when the row was already advanced. Does not commit.
    """
    result = await db.execute(
        update(RecurringTransaction)
        .where(
            RecurringTransaction.id == recurring_id,
            or_(
                RecurringTransaction.last_generated_date.is_(None),
                RecurringTransaction.last_generated_date < occurrence,
            ),
        )
        .values(last_generated_date=occurrence)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
