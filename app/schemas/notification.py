# app/schemas/notification.py
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
import uuid

# Severity shown by clients: 50% -> info, 80% -> warning, 100% -> alert
NotificationStatus = Literal["info", "warning", "alert"]

class NotificationCreate(BaseModel):
    user_id: uuid.UUID
    title: str = Field(..., max_length=200)
    message: str
    type: str = "budget_alert"
    status: NotificationStatus = "info"
    category_id: Optional[uuid.UUID] = None
    percentage: Optional[float] = None

class NotificationRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    message: str
    type: str
    status: str
    category_id: Optional[uuid.UUID] = None
    percentage: Optional[float] = None
    is_read: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
