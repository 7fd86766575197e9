"""
services/notification_service.py
--------------------------------
Business logic for the notification queue.

Rows are created here and marked as delivered by whatever process sends
them; delivery itself is not performed by this service.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.errors import AccessDenied, EntityNotFound, InvalidReference
from taskhub.core.logging import get_logger
from taskhub.models.notification import Notification
from taskhub.schemas.notification import (
    NotificationBulkAction,
    NotificationBulkResult,
    NotificationCreate,
    NotificationUpdate,
    UserNotificationCreate,
)
from taskhub.services.tenancy import (
    company_filter,
    validate_task_access,
    validate_user_access,
)

logger = get_logger(__name__)

# flag column -> timestamp column stamped when the flag becomes True
_DELIVERY_FLAGS = {
    "is_sent": "sent_at",
    "telegram_sent": "telegram_sent_at",
    "email_sent": "email_sent_at",
}


class NotificationService:

    @staticmethod
    async def list_notifications(
        db: AsyncSession,
        company_id: str,
        user_id: Optional[str] = None,
        is_sent: Optional[bool] = None,
        notification_type: Optional[str] = None,
        task_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Notification]:
        if user_id and not await validate_user_access(db, user_id, company_id):
            raise InvalidReference("User not found or not from the same company")
        if task_id and not await validate_task_access(db, task_id, company_id):
            raise InvalidReference("Task not found or not accessible")

        stmt = company_filter(select(Notification), Notification.company_id, company_id)
        if user_id:
            stmt = stmt.where(Notification.recipient_user_id == user_id)
        if is_sent is not None:
            stmt = stmt.where(Notification.is_sent.is_(is_sent))
        if notification_type:
            stmt = stmt.where(Notification.notification_type == notification_type)
        if task_id:
            stmt = stmt.where(Notification.task_id == task_id)

        result = await db.execute(
            stmt.order_by(Notification.created_at.desc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    @staticmethod
    async def create_notification(
        db: AsyncSession, company_id: str, data: NotificationCreate
    ) -> Notification:
        """Recipient and task must belong to the caller's company."""
        if not await validate_user_access(db, data.recipient_user_id, company_id):
            raise InvalidReference("Recipient not found or not from the same company")
        if data.task_id and not await validate_task_access(db, data.task_id, company_id):
            raise InvalidReference("Task not found or not accessible")

        notification = Notification(
            company_id=company_id,
            recipient_user_id=data.recipient_user_id,
            task_id=data.task_id,
            message_text=data.message_text,
            notification_type=data.notification_type.value,
            send_to_telegram=data.send_to_telegram,
            send_to_email=data.send_to_email,
        )
        db.add(notification)
        await db.flush()
        await db.refresh(notification)
        logger.info(
            "Notification queued",
            notification_id=notification.id,
            company_id=company_id,
            type=notification.notification_type,
        )
        return notification

    @staticmethod
    async def get_notification(
        db: AsyncSession, notification_id: str, company_id: str
    ) -> Notification:
        result = await db.execute(
            company_filter(
                select(Notification).where(Notification.id == notification_id),
                Notification.company_id,
                company_id,
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise EntityNotFound("Notification not found")
        return notification

    @staticmethod
    async def update_notification(
        db: AsyncSession, notification_id: str, company_id: str, data: NotificationUpdate
    ) -> Notification:
        notification = await NotificationService.get_notification(db, notification_id, company_id)
        now = datetime.now(timezone.utc)
        for flag, stamp in _DELIVERY_FLAGS.items():
            value = getattr(data, flag)
            if value is None:
                continue
            setattr(notification, flag, value)
            setattr(notification, stamp, now if value else None)
        await db.flush()
        await db.refresh(notification)
        return notification

    @staticmethod
    async def delete_notification(
        db: AsyncSession, notification_id: str, company_id: str
    ) -> None:
        notification = await NotificationService.get_notification(db, notification_id, company_id)
        await db.delete(notification)
        await db.flush()
        logger.info("Notification deleted", notification_id=notification_id)

    # ── Per-user inbox ────────────────────────────────────────────────────────

    @staticmethod
    async def _require_recipient(db: AsyncSession, user_id: str, company_id: str) -> None:
        if not await validate_user_access(db, user_id, company_id):
            logger.warning(
                "Notification inbox of foreign user rejected",
                target_user_id=user_id,
                company_id=company_id,
            )
            raise AccessDenied("Access denied to user notifications")

    @staticmethod
    async def list_user_notifications(
        db: AsyncSession,
        user_id: str,
        company_id: str,
        unread_only: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Notification]:
        await NotificationService._require_recipient(db, user_id, company_id)
        return await NotificationService.list_notifications(
            db,
            company_id,
            user_id=user_id,
            is_sent=False if unread_only else None,
            limit=limit,
            offset=offset,
        )

    @staticmethod
    async def create_user_notification(
        db: AsyncSession, user_id: str, company_id: str, data: UserNotificationCreate
    ) -> Notification:
        await NotificationService._require_recipient(db, user_id, company_id)
        return await NotificationService.create_notification(
            db,
            company_id,
            NotificationCreate(recipient_user_id=user_id, **data.model_dump()),
        )

    @staticmethod
    async def bulk_update_user_notifications(
        db: AsyncSession, user_id: str, company_id: str, action: NotificationBulkAction
    ) -> NotificationBulkResult:
        """
        mark_all_read → flag every unsent notification of the user as sent on
                        all channels, stamping the delivery timestamps.
        delete_read   → remove the user's notifications already sent.

        Both statements carry the company_id clause, so rows of another
        company are never touched.
        """
        await NotificationService._require_recipient(db, user_id, company_id)
        owned = (
            Notification.recipient_user_id == user_id,
            Notification.company_id == company_id,
        )

        if action == NotificationBulkAction.mark_all_read:
            now = datetime.now(timezone.utc)
            result = await db.execute(
                update(Notification)
                .where(*owned, Notification.is_sent.is_(False))
                .values(
                    is_sent=True,
                    sent_at=now,
                    telegram_sent=True,
                    telegram_sent_at=now,
                    email_sent=True,
                    email_sent_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            logger.info("Notifications marked read", user_id=user_id, count=result.rowcount)
            return NotificationBulkResult(updated_count=result.rowcount)

        result = await db.execute(
            delete(Notification)
            .where(*owned, Notification.is_sent.is_(True))
            .execution_options(synchronize_session=False)
        )
        logger.info("Read notifications deleted", user_id=user_id, count=result.rowcount)
        return NotificationBulkResult(deleted_count=result.rowcount)
