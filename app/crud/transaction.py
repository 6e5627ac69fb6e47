# app/crud/transaction.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc, func
from app.models.transaction import Transaction
from typing import Iterable, List, Optional, Tuple
from datetime import date
import uuid
from app.schemas.transaction import TransactionCreate, TransactionUpdate

def _filtered(
    user_id: uuid.UUID,
    type: Optional[str] = None,
    category_id: Optional[uuid.UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    query = select(Transaction).where(Transaction.user_id == user_id)
    if type:
        query = query.where(Transaction.type == type)
    if category_id:
        query = query.where(Transaction.category_id == category_id)
    if start_date:
        query = query.where(Transaction.transaction_date >= start_date)
    if end_date:
        query = query.where(Transaction.transaction_date <= end_date)
    return query

async def get_transactions_page(
    user_id: uuid.UUID,
    db: AsyncSession,
    type: Optional[str] = None,
    category_id: Optional[uuid.UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    page_size: int = 50,
) -> Tuple[List[Transaction], int]:
    """Filtered transactions for a user, newest first, with the unpaged total."""
    query = _filtered(user_id, type, category_id, start_date, end_date)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(
        query.order_by(desc(Transaction.transaction_date), desc(Transaction.created_at))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return result.scalars().all(), total

async def get_transactions_in_range(
    user_id: uuid.UUID,
    start_date: date,
    end_date: date,
    db: AsyncSession,
    type: Optional[str] = None,
) -> List[Transaction]:
    result = await db.execute(
        _filtered(user_id, type=type, start_date=start_date, end_date=end_date)
        .order_by(Transaction.transaction_date)
    )
    return result.scalars().all()

async def get_expenses_for_categories(
    user_id: uuid.UUID,
    category_ids: Iterable[uuid.UUID],
    start_date: date,
    end_date: date,
    db: AsyncSession,
) -> List[Transaction]:
    """Expense rows of the given categories inside [start_date, end_date]."""
    category_ids = list(set(category_ids))
    if not category_ids:
        return []
    result = await db.execute(
        _filtered(user_id, type="expense", start_date=start_date, end_date=end_date)
        .where(Transaction.category_id.in_(category_ids))
    )
    return result.scalars().all()

async def get_transaction_by_id(transaction_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Transaction]:
    result = await db.execute(
        select(Transaction).where(Transaction.id == transaction_id, Transaction.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_transaction_for_user(user_id: uuid.UUID, tx_in: TransactionCreate, db: AsyncSession) -> Transaction:
    new_tx = Transaction(**tx_in.model_dump(), user_id=user_id)
    db.add(new_tx)
    await db.commit()
    await db.refresh(new_tx)
    await db.refresh(new_tx, attribute_names=["category"])
    return new_tx

async def update_transaction(tx: Transaction, tx_in: TransactionUpdate, db: AsyncSession) -> Transaction:
    for field, value in tx_in.model_dump(exclude_unset=True).items():
        setattr(tx, field, value)
    db.add(tx)
    await db.commit()
    await db.refresh(tx)
    await db.refresh(tx, attribute_names=["category"])
    return tx

async def delete_transaction(tx: Transaction, db: AsyncSession) -> None:
    await db.delete(tx)
    await db.commit()
