"""
dependencies.py
---------------
FastAPI dependency injection functions for identity and tenant context.

Flow:
  1. SessionGatewayMiddleware has already verified the bearer token and that
     it was issued to the user named in the identity header.
  2. get_caller resolves that user's company and role (Tenant Resolver).
  3. get_tenant_caller additionally requires a company; every tenant-scoped
     route depends on it.
  4. get_admin_caller layers a platform-admin role check on get_caller.

All of them share the request's single database session.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.config import Settings
from taskhub.core.errors import AccessDenied
from taskhub.core.logging import get_logger
from taskhub.db.session import get_db
from taskhub.models.user import UserRole
from taskhub.services.tenancy import (
    UserCompanyInfo,
    check_access,
    get_user_company_info,
    require_company,
)

logger = get_logger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_caller(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UserCompanyInfo:
    """Resolve the identity header to {user_id, company_id, user_role}."""
    return await get_user_company_info(db, request.headers.get(settings.USER_ID_HEADER))


async def get_tenant_caller(
    caller: Annotated[UserCompanyInfo, Depends(get_caller)],
) -> UserCompanyInfo:
    """Like get_caller, but rejects users not assigned to any company (403)."""
    require_company(caller)
    return caller


async def get_admin_caller(
    caller: Annotated[UserCompanyInfo, Depends(get_caller)],
) -> UserCompanyInfo:
    if not check_access(caller.user_role, [UserRole.admin]):
        logger.warning("Admin endpoint denied", user_id=caller.user_id, role=caller.user_role)
        raise AccessDenied("Admin privileges required")
    return caller


DbSession = Annotated[AsyncSession, Depends(get_db)]
Caller = Annotated[UserCompanyInfo, Depends(get_caller)]
TenantCaller = Annotated[UserCompanyInfo, Depends(get_tenant_caller)]
AdminCaller = Annotated[UserCompanyInfo, Depends(get_admin_caller)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
