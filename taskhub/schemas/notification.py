"""
schemas/notification.py
-----------------------
Pydantic models for queued notifications.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from taskhub.models.notification import NotificationType


class UserNotificationCreate(BaseModel):
    """Body of POST /api/users/{id}/notifications; the recipient is the path user."""
    task_id: Optional[str] = None
    message_text: str = Field(..., min_length=1, max_length=4096)
    notification_type: NotificationType = NotificationType.general
    send_to_telegram: bool = True
    send_to_email: bool = True


class NotificationCreate(UserNotificationCreate):
    recipient_user_id: str


class NotificationUpdate(BaseModel):
    """Delivery bookkeeping; setting a flag to True stamps its *_at column."""
    is_sent: Optional[bool] = None
    telegram_sent: Optional[bool] = None
    email_sent: Optional[bool] = None


class NotificationRead(BaseModel):
    id: str
    company_id: str
    recipient_user_id: str
    task_id: Optional[str] = None
    message_text: str
    notification_type: str
    send_to_telegram: bool
    send_to_email: bool
    is_sent: bool
    sent_at: Optional[datetime] = None
    telegram_sent: bool
    telegram_sent_at: Optional[datetime] = None
    email_sent: bool
    email_sent_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationBulkAction(str, Enum):
    mark_all_read = "mark_all_read"
    delete_read = "delete_read"


class NotificationBulkRequest(BaseModel):
    action: NotificationBulkAction


class NotificationBulkResult(BaseModel):
    updated_count: Optional[int] = None
    deleted_count: Optional[int] = None
