# app/api/v1/routes/notification.py
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID
from datetime import datetime
import logging

from app.schemas.notification import NotificationRead
from app.crud import notification as crud_notification
from app.api import deps
from app.core.database import get_async_session
from app.core.auth import User
from app.utils.notifications import connect_user, disconnect_user

router = APIRouter()
logger = logging.getLogger(__name__)


def _not_found() -> HTTPException:
    return HTTPException(status.HTTP_404_NOT_FOUND, detail="Notification not found")


@router.get("/", response_model=List[NotificationRead])
async def get_notifications(
    unread_only: bool = Query(False, description="Only unread notifications"),
    type: Optional[str] = Query(None, description="e.g. budget_alert"),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user),
):
    return await crud_notification.get_notifications_for_user(
        current_user.id, db, unread_only=unread_only, type=type, limit=limit
    )

@router.get("/unread-count", response_model=int)
async def get_unread_count(
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user),
):
    return await crud_notification.get_unread_count(current_user.id, db)

@router.post("/read_all", response_model=int)
async def mark_all_notifications_as_read(
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user),
):
    """Returns how many notifications were marked read."""
    return await crud_notification.mark_all_notifications_as_read(current_user.id, db)

@router.get("/{notification_id}", response_model=NotificationRead)
async def get_notification(
    notification_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user),
):
    notification = await crud_notification.get_notification_by_id(notification_id, current_user.id, db)
    if not notification:
        raise _not_found()
    return notification

@router.post("/{notification_id}/read", response_model=NotificationRead)
async def mark_notification_as_read(
    notification_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user),
):
    notification = await crud_notification.mark_notification_as_read(notification_id, current_user.id, db)
    if not notification:
        raise _not_found()
    return notification

@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user),
):
    if not await crud_notification.delete_notification(notification_id, current_user.id, db):
        raise _not_found()

@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: str = Query(...),
    db: AsyncSession = Depends(get_async_session)
):
    """WebSocket endpoint for real-time notifications"""
    try:
        user = await deps.get_current_user_from_token(token, db)
    except HTTPException as e:
        logger.info(f"WebSocket authentication failed: {e.detail}")
        await websocket.close(code=4001, reason="Authentication failed")
        return

    await websocket.accept()
    connect_user(websocket, user.id)
    try:
        # Clients may ping; the channel is otherwise server-to-client
        while True:
            await websocket.receive_text()
            await websocket.send_json({"status": "received", "timestamp": datetime.utcnow().isoformat()})
    except WebSocketDisconnect:
        pass
    finally:
        disconnect_user(websocket, user.id)
