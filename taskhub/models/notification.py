"""
models/notification.py
----------------------
Queued user notification. Delivery itself happens outside this service;
rows only record what should be sent and what was sent.
"""

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from taskhub.db.base import Base, CompanyScoped


class NotificationType(str, PyEnum):
    general = "general"
    task_assigned = "task_assigned"
    task_completed = "task_completed"
    task_overdue = "task_overdue"
    task_reminder = "task_reminder"
    deadline_approaching = "deadline_approaching"
    welcome = "welcome"
    comment_added = "comment_added"
    status_changed = "status_changed"
    system = "system"


class Notification(Base, CompanyScoped):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    recipient_user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    task_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True
    )
    message_text: Mapped[str] = mapped_column(Text, nullable=False)
    notification_type: Mapped[str] = mapped_column(
        String(64), nullable=False, default=NotificationType.general.value
    )
    send_to_telegram: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    send_to_email: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    is_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    telegram_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    telegram_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    email_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<Notification id={self.id} recipient={self.recipient_user_id}>"
