"""
services/tenancy.py
-------------------
Tenant Resolver and Access Validators.

Critical security invariant:
  company_id is the only isolation boundary. Every route resolves the
  caller's company first, then validates every entity id taken from client
  input against that company before reading, writing or joining on it.

Validators are existence + ownership checks: True only if the row exists AND
its company_id equals the given one. A None company always yields False
without touching the database.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, TypeVar

from sqlalchemy import Select, false, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from taskhub.core.errors import MissingIdentity, TenantNotAssigned, UserNotFound
from taskhub.core.logging import get_logger
from taskhub.models.business_process import BusinessProcess
from taskhub.models.task import Task
from taskhub.models.telegram_group import DEFAULT_PROVIDER_TYPE, TelegramChatBinding
from taskhub.models.user import User

logger = get_logger(__name__)

SelectT = TypeVar("SelectT", bound=Select)


@dataclass(frozen=True)
class UserCompanyInfo:
    user_id: str
    company_id: Optional[str]
    user_role: str


# ── Tenant Resolver ───────────────────────────────────────────────────────────

async def get_user_company_info(
    db: AsyncSession, user_id: Optional[str]
) -> UserCompanyInfo:
    """
    Resolve the caller's company and role from their identity.

    Raises:
        MissingIdentity: If no identity was supplied.
        UserNotFound: If no user row matches it.

    A user without a company is returned with company_id=None; use
    require_company() before any tenant-scoped operation.
    """
    if not user_id:
        raise MissingIdentity()

    result = await db.execute(
        select(User.company_id, User.role).where(User.id == user_id)
    )
    row = result.one_or_none()
    if row is None:
        logger.warning("Caller identity does not match any user", user_id=user_id)
        raise UserNotFound()

    return UserCompanyInfo(user_id=user_id, company_id=row.company_id, user_role=row.role)


def require_company(info: UserCompanyInfo) -> str:
    """Return the caller's company id or raise TenantNotAssigned."""
    if not info.company_id:
        raise TenantNotAssigned()
    return info.company_id


def check_access(user_role: str, required_roles: Iterable[str] = ()) -> bool:
    """True when no roles are required or user_role is one of them."""
    required = [str(getattr(role, "value", role)) for role in required_roles]
    if not required:
        return True
    return user_role in required


def company_filter(
    stmt: SelectT,
    column: InstrumentedAttribute,
    company_id: Optional[str],
) -> SelectT:
    """
    Append a bound `column = :company_id` clause to a SELECT.

    A None company yields a statement matching nothing, never an
    unfiltered one.
    """
    if company_id is None:
        return stmt.where(false())
    return stmt.where(column == company_id)


# ── Access Validators ─────────────────────────────────────────────────────────

async def _exists_in_company(
    db: AsyncSession,
    model,
    entity_id: Optional[str],
    company_id: Optional[str],
    *criteria,
) -> bool:
    if not company_id or not entity_id:
        return False
    stmt = select(model.id).where(model.id == entity_id, *criteria)
    stmt = company_filter(stmt, model.company_id, company_id)
    result = await db.execute(stmt.limit(1))
    return result.first() is not None


async def validate_user_access(
    db: AsyncSession, target_user_id: Optional[str], company_id: Optional[str]
) -> bool:
    return await _exists_in_company(db, User, target_user_id, company_id)


async def validate_task_access(
    db: AsyncSession, task_id: Optional[str], company_id: Optional[str]
) -> bool:
    return await _exists_in_company(db, Task, task_id, company_id)


async def validate_business_process_access(
    db: AsyncSession, process_id: Optional[str], company_id: Optional[str]
) -> bool:
    return await _exists_in_company(db, BusinessProcess, process_id, company_id)


async def validate_telegram_group_access(
    db: AsyncSession, group_id: Optional[str], company_id: Optional[str]
) -> bool:
    return await _exists_in_company(
        db,
        TelegramChatBinding,
        group_id,
        company_id,
        TelegramChatBinding.provider_type == DEFAULT_PROVIDER_TYPE,
    )


async def validate_users_access(
    db: AsyncSession, user_ids: Sequence[str], company_id: Optional[str]
) -> bool:
    """True only if every id in user_ids belongs to company_id."""
    unique_ids = set(user_ids)
    if not unique_ids:
        return True
    if not company_id:
        return False
    stmt = select(func.count()).select_from(User).where(User.id.in_(unique_ids))
    stmt = company_filter(stmt, User.company_id, company_id)
    result = await db.execute(stmt)
    return result.scalar_one() == len(unique_ids)
