"""
services/user_service.py
------------------------
Business logic for listing, provisioning and editing users.

All queries are scoped by company_id to enforce strict data isolation.
Users are never created from a Telegram login; a director provisions them
here and the Telegram id links the account on first sign-in.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.errors import AccessDenied, Conflict, EntityNotFound
from taskhub.core.logging import get_logger
from taskhub.models.company import Company
from taskhub.models.user import User, UserRole
from taskhub.schemas.user import SELF_SERVICE_FIELDS, UserCreate, UserUpdate
from taskhub.services.tenancy import UserCompanyInfo, company_filter, validate_user_access

logger = get_logger(__name__)


class UserService:

    @staticmethod
    async def list_users(
        db: AsyncSession, company_id: str, active: Optional[bool] = None
    ) -> list[User]:
        stmt = company_filter(select(User), User.company_id, company_id)
        if active is not None:
            stmt = stmt.where(User.is_active == active)
        result = await db.execute(stmt.order_by(User.name))
        return list(result.scalars().all())

    @staticmethod
    async def get_user(db: AsyncSession, user_id: str, company_id: str) -> User:
        """Raises EntityNotFound for unknown users and users of other companies."""
        if not await validate_user_access(db, user_id, company_id):
            raise EntityNotFound("User not found")
        result = await db.execute(
            company_filter(select(User).where(User.id == user_id), User.company_id, company_id)
        )
        return result.scalar_one()

    @staticmethod
    async def create_user(
        db: AsyncSession, caller: UserCompanyInfo, data: UserCreate
    ) -> User:
        """
        Director-initiated user creation within their own company.
        Raises Conflict on a duplicate username or Telegram id.
        """
        if caller.user_role != UserRole.director.value:
            raise AccessDenied("Only a director can add users")
        if data.role == UserRole.admin and caller.user_role != UserRole.admin.value:
            raise AccessDenied("Only a platform admin can grant the admin role")

        user = User(
            name=data.name,
            username=data.username,
            avatar=data.avatar,
            role=data.role.value,
            position=data.position,
            email=data.email,
            phone=data.phone,
            telegram_user_id=data.telegram_user_id,
            company_id=caller.company_id,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise Conflict("Username or Telegram id is already registered")
        await db.refresh(user)

        company = await db.get(Company, caller.company_id)
        if company is not None and user.id not in company.employee_user_ids:
            company.employee_user_ids = [*company.employee_user_ids, user.id]
            await db.flush()

        logger.info(
            "Director created user",
            new_user_id=user.id,
            role=user.role,
            company_id=caller.company_id,
        )
        return user

    @staticmethod
    async def update_user(
        db: AsyncSession, caller: UserCompanyInfo, user_id: str, data: UserUpdate
    ) -> User:
        """
        A director may change any field of a colleague. Anyone else may only
        edit their own profile, restricted to SELF_SERVICE_FIELDS. The admin
        role is granted and revoked by platform admins only.
        """
        user = await UserService.get_user(db, user_id, caller.company_id)
        changes = data.model_dump(exclude_unset=True)
        if "role" in changes and caller.user_role != UserRole.admin.value:
            if changes["role"] == UserRole.admin or user.role == UserRole.admin.value:
                raise AccessDenied("Only a platform admin can grant or revoke the admin role")

        if caller.user_role != UserRole.director.value:
            if caller.user_id != user_id:
                raise AccessDenied("You can only edit your own profile")
            forbidden = set(changes) - SELF_SERVICE_FIELDS
            if forbidden:
                raise AccessDenied(
                    f"Not allowed to change: {', '.join(sorted(forbidden))}"
                )

        for field, value in changes.items():
            if isinstance(value, UserRole):
                value = value.value
            setattr(user, field, value)

        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise Conflict("Username is already taken")
        await db.refresh(user)
        logger.info("User updated", user_id=user.id, fields=sorted(changes))
        return user
