"""
services/telegram_group_service.py
----------------------------------
Company Telegram group bindings.

Only bindings with provider_type == DEFAULT_PROVIDER_TYPE are visible here.
A default assignee that names a user must be a user of the same company.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.errors import AccessDenied, EntityNotFound, InvalidReference, MalformedPayload
from taskhub.core.logging import get_logger
from taskhub.models.telegram_group import DEFAULT_PROVIDER_TYPE, TelegramChatBinding
from taskhub.models.user import User, UserRole
from taskhub.schemas.telegram_group import TelegramGroupRead, TelegramGroupUpdate
from taskhub.schemas.user import UserBrief
from taskhub.services.tenancy import (
    UserCompanyInfo,
    check_access,
    company_filter,
    validate_telegram_group_access,
    validate_user_access,
)

logger = get_logger(__name__)

GROUP_MANAGER_ROLES = (UserRole.director, UserRole.admin)


def _ensure_manager(caller: UserCompanyInfo) -> None:
    if not check_access(caller.user_role, GROUP_MANAGER_ROLES):
        raise AccessDenied("Only a director or an admin can manage Telegram groups")


async def _to_read(db: AsyncSession, binding: TelegramChatBinding) -> TelegramGroupRead:
    group = TelegramGroupRead.model_validate(binding)
    if binding.default_assignee_option:
        result = await db.execute(
            select(User).where(
                User.id == binding.default_assignee_option,
                User.company_id == binding.company_id,
            )
        )
        assignee = result.scalar_one_or_none()
        group.default_assignee = UserBrief.model_validate(assignee) if assignee else None
    return group


class TelegramGroupService:

    @staticmethod
    async def list_groups(db: AsyncSession, caller: UserCompanyInfo) -> list[TelegramGroupRead]:
        _ensure_manager(caller)
        stmt = company_filter(
            select(TelegramChatBinding).where(
                TelegramChatBinding.provider_type == DEFAULT_PROVIDER_TYPE
            ),
            TelegramChatBinding.company_id,
            caller.company_id,
        )
        result = await db.execute(stmt.order_by(TelegramChatBinding.created_at.desc()))
        return [await _to_read(db, binding) for binding in result.scalars().all()]

    @staticmethod
    async def update_group(
        db: AsyncSession, caller: UserCompanyInfo, data: TelegramGroupUpdate
    ) -> TelegramGroupRead:
        _ensure_manager(caller)
        if not await validate_telegram_group_access(db, data.id, caller.company_id):
            raise EntityNotFound("Telegram group not found or access denied")

        changes = data.model_dump(exclude_unset=True, exclude={"id"})
        if not changes:
            raise MalformedPayload("No updates provided")

        assignee = changes.get("default_assignee_option")
        if assignee and not await validate_user_access(db, assignee, caller.company_id):
            raise InvalidReference("Default assignee user not found or not from the same company")

        result = await db.execute(
            company_filter(
                select(TelegramChatBinding).where(
                    TelegramChatBinding.id == data.id,
                    TelegramChatBinding.provider_type == DEFAULT_PROVIDER_TYPE,
                ),
                TelegramChatBinding.company_id,
                caller.company_id,
            )
        )
        binding = result.scalar_one()
        if "is_active" in changes and changes["is_active"] is not None:
            binding.is_active = changes["is_active"]
        if "default_assignee_option" in changes:
            binding.default_assignee_option = assignee

        await db.flush()
        await db.refresh(binding)
        logger.info("Telegram group updated", group_id=binding.id, company_id=caller.company_id)
        return await _to_read(db, binding)
