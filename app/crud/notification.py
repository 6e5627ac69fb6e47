# app/crud/notification.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import update, delete, desc, func
from app.models.notification import Notification
from app.schemas.notification import NotificationCreate
from typing import List, Optional
import uuid

async def create_notification(notification_in: NotificationCreate, db: AsyncSession) -> Notification:
    notification = Notification(**notification_in.model_dump(), is_read=False)
    db.add(notification)
    await db.commit()
    await db.refresh(notification)
    return notification

async def get_notification_by_id(notification_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Notification]:
    result = await db.execute(
        select(Notification).where(Notification.id == notification_id, Notification.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def get_notifications_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    unread_only: bool = False,
    type: Optional[str] = None,
    limit: int = 50,
) -> List[Notification]:
    """Newest first."""
    query = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.is_read == False)  # noqa: E712
    if type:
        query = query.where(Notification.type == type)
    result = await db.execute(query.order_by(desc(Notification.created_at)).limit(limit))
    return result.scalars().all()

async def get_unread_count(user_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
    )
    return result.scalar_one()

async def mark_notification_as_read(notification_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Notification]:
    notification = await get_notification_by_id(notification_id, user_id, db)
    if notification is None:
        return None
    if not notification.is_read:
        notification.is_read = True
        await db.commit()
        await db.refresh(notification)
    return notification

async def mark_all_notifications_as_read(user_id: uuid.UUID, db: AsyncSession) -> int:
    """Returns how many notifications changed."""
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount

async def delete_notification(notification_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> bool:
    result = await db.execute(
        delete(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount == 1
