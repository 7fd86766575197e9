"""
api/routes/notifications.py
---------------------------
Notification queue endpoints, scoped to the caller's company.

GET    /api/notifications
POST   /api/notifications
GET    /api/notifications/{id}
PUT    /api/notifications/{id}   - Mark delivery flags.
DELETE /api/notifications/{id}

GET    /api/users/{id}/notifications   - Inbox of one company user.
POST   /api/users/{id}/notifications
PATCH  /api/users/{id}/notifications   - mark_all_read | delete_read
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query, status

from taskhub.dependencies import DbSession, TenantCaller
from taskhub.models.notification import NotificationType
from taskhub.schemas.notification import (
    NotificationBulkRequest,
    NotificationBulkResult,
    NotificationCreate,
    NotificationRead,
    NotificationUpdate,
    UserNotificationCreate,
)
from taskhub.services.notification_service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])
user_router = APIRouter(prefix="/api/users/{user_id}/notifications", tags=["Notifications"])


@router.get("", response_model=list[NotificationRead], summary="List notifications")
async def list_notifications(
    db: DbSession,
    caller: TenantCaller,
    user_id: Optional[str] = None,
    is_sent: Optional[bool] = None,
    notification_type: Optional[NotificationType] = None,
    task_id: Optional[str] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[NotificationRead]:
    notifications = await NotificationService.list_notifications(
        db,
        caller.company_id,
        user_id=user_id,
        is_sent=is_sent,
        notification_type=notification_type.value if notification_type else None,
        task_id=task_id,
        limit=limit,
        offset=offset,
    )
    return [NotificationRead.model_validate(n) for n in notifications]


@router.post(
    "",
    response_model=NotificationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Queue a notification",
)
async def create_notification(
    body: NotificationCreate, db: DbSession, caller: TenantCaller
) -> NotificationRead:
    notification = await NotificationService.create_notification(db, caller.company_id, body)
    return NotificationRead.model_validate(notification)


@router.get("/{notification_id}", response_model=NotificationRead, summary="Get a notification")
async def get_notification(
    notification_id: str, db: DbSession, caller: TenantCaller
) -> NotificationRead:
    notification = await NotificationService.get_notification(
        db, notification_id, caller.company_id
    )
    return NotificationRead.model_validate(notification)


@router.put(
    "/{notification_id}",
    response_model=NotificationRead,
    summary="Update notification delivery state",
)
async def update_notification(
    notification_id: str, body: NotificationUpdate, db: DbSession, caller: TenantCaller
) -> NotificationRead:
    notification = await NotificationService.update_notification(
        db, notification_id, caller.company_id, body
    )
    return NotificationRead.model_validate(notification)


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a notification",
)
async def delete_notification(
    notification_id: str, db: DbSession, caller: TenantCaller
) -> None:
    await NotificationService.delete_notification(db, notification_id, caller.company_id)


@user_router.get("", response_model=list[NotificationRead], summary="List a user's notifications")
async def list_user_notifications(
    user_id: str,
    db: DbSession,
    caller: TenantCaller,
    unread_only: bool = False,
    limit: Annotated[int, Query(ge=1, le=200)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[NotificationRead]:
    notifications = await NotificationService.list_user_notifications(
        db, user_id, caller.company_id, unread_only=unread_only, limit=limit, offset=offset
    )
    return [NotificationRead.model_validate(n) for n in notifications]


@user_router.post(
    "",
    response_model=NotificationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Queue a notification for a user",
)
async def create_user_notification(
    user_id: str, body: UserNotificationCreate, db: DbSession, caller: TenantCaller
) -> NotificationRead:
    notification = await NotificationService.create_user_notification(
        db, user_id, caller.company_id, body
    )
    return NotificationRead.model_validate(notification)


@user_router.patch(
    "",
    response_model=NotificationBulkResult,
    response_model_exclude_none=True,
    summary="Bulk-update a user's notifications",
)
async def bulk_update_user_notifications(
    user_id: str, body: NotificationBulkRequest, db: DbSession, caller: TenantCaller
) -> NotificationBulkResult:
    return await NotificationService.bulk_update_user_notifications(
        db, user_id, caller.company_id, body.action
    )
