# app/utils/notifications.py
from typing import Dict, List, Any, Optional
from datetime import datetime
import uuid
import logging

from fastapi import WebSocket
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.crud.notification import create_notification
from app.crud.user import get_user_by_id
from app.schemas.notification import NotificationCreate
from app.utils.email import send_email_via_sendgrid, render_budget_alert_email

logger = logging.getLogger(__name__)

# Store active WebSocket connections by user_id
active_connections: Dict[uuid.UUID, List[WebSocket]] = {}


def connect_user(websocket: WebSocket, user_id: uuid.UUID):
    """Register a new WebSocket connection for a user"""
    active_connections.setdefault(user_id, []).append(websocket)
    logger.info(f"User {user_id} connected. Total connections: {len(active_connections[user_id])}")

def disconnect_user(websocket: WebSocket, user_id: uuid.UUID):
    """Remove a WebSocket connection for a user"""
    connections = active_connections.get(user_id)
    if connections is not None:
        if websocket in connections:
            connections.remove(websocket)
        if not connections:
            del active_connections[user_id]

    logger.info(f"User {user_id} disconnected. Remaining connections: {len(active_connections.get(user_id, []))}")

async def send_realtime_notification(user_id: uuid.UUID, notification: Any):
    """Send a notification to a user via WebSocket if they're connected"""
    if user_id not in active_connections:
        return

    notification_data = {
        "id": str(notification.id),
        "title": notification.title,
        "message": notification.message,
        "type": notification.type,
        "status": notification.status,
        "percentage": notification.percentage,
        "created_at": (notification.created_at or datetime.utcnow()).isoformat(),
    }

    dead_connections = []
    for websocket in list(active_connections[user_id]):
        try:
            await websocket.send_json({"type": "notification", "data": notification_data})
        except Exception as e:
            logger.error(f"Failed to send to websocket: {str(e)}")
            dead_connections.append(websocket)

    for dead in dead_connections:
        disconnect_user(dead, user_id)


def _alert_status(percentage: float) -> str:
    if percentage >= 100:
        return "alert"
    if percentage >= 80:
        return "warning"
    return "info"


class Notifier:
    """
    Delivers budget and goal alerts.

    An alert is stored as an in-app notification, pushed to any open
    WebSocket of the user and, when SendGrid is configured, emailed.
    """

    def __init__(self, session_factory: async_sessionmaker = AsyncSessionLocal):
        self.session_factory = session_factory

    async def send_goal_or_budget_alert(
        self,
        user_id: uuid.UUID,
        category_name: str,
        current_amount: float,
        target_amount: float,
        percentage: float,
        threshold: Optional[int] = None,
        category_id: Optional[uuid.UUID] = None,
    ) -> bool:
        """
        Returns True once the email, if email is configured, was accepted by
        SendGrid and the in-app notification is committed.

        The email goes out first. A rejected email leaves nothing stored, so
        the retry on the next tick does not duplicate the in-app alert.
        """
        crossed = threshold if threshold is not None else int(percentage)
        status = _alert_status(crossed)
        if status == "alert":
            title = f"🚨 {category_name} budget exceeded"
        elif status == "warning":
            title = f"⚠️ {category_name} budget almost used"
        else:
            title = f"📊 {category_name} budget halfway"
        message = (
            f"You've crossed {crossed}% of your {category_name} budget: "
            f"{current_amount:.2f} of {target_amount:.2f} spent ({percentage:.1f}%)."
        )

        async with self.session_factory() as db:
            user = await get_user_by_id(user_id, db)
            if user is None:
                logger.warning(f"Alert for unknown user {user_id} dropped")
                return False
            user_email = user.email
            user_name = user.full_name or user.email.split("@")[0]

        if settings.email_enabled:
            body = render_budget_alert_email(user_name, category_name, current_amount, target_amount, percentage)
            if not await send_email_via_sendgrid(user_email, title, body):
                return False

        async with self.session_factory() as db:
            notification = await create_notification(NotificationCreate(
                user_id=user_id,
                title=title,
                message=message,
                type="budget_alert",
                status=status,
                category_id=category_id,
                percentage=percentage,
            ), db)

        await send_realtime_notification(user_id, notification)
        return True
