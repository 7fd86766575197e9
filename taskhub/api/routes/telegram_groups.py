"""
api/routes/telegram_groups.py
-----------------------------
Company Telegram group bindings (director or admin only).

GET /api/telegram-groups  - List bindings.
PUT /api/telegram-groups  - Toggle a binding or set its default assignee.
"""

from fastapi import APIRouter

from taskhub.dependencies import DbSession, TenantCaller
from taskhub.schemas.telegram_group import TelegramGroupRead, TelegramGroupUpdate
from taskhub.services.telegram_group_service import TelegramGroupService

router = APIRouter(prefix="/api/telegram-groups", tags=["Telegram groups"])


@router.get("", response_model=list[TelegramGroupRead], summary="List Telegram groups")
async def list_groups(db: DbSession, caller: TenantCaller) -> list[TelegramGroupRead]:
    return await TelegramGroupService.list_groups(db, caller)


@router.put("", response_model=TelegramGroupRead, summary="Update a Telegram group")
async def update_group(
    body: TelegramGroupUpdate, db: DbSession, caller: TenantCaller
) -> TelegramGroupRead:
    return await TelegramGroupService.update_group(db, caller, body)
