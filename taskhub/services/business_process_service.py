"""
services/business_process_service.py
------------------------------------
Business logic for business processes.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.logging import get_logger
from taskhub.models.business_process import BusinessProcess
from taskhub.schemas.business_process import BusinessProcessCreate
from taskhub.services.tenancy import UserCompanyInfo, company_filter

logger = get_logger(__name__)


class BusinessProcessService:

    @staticmethod
    async def list_processes(
        db: AsyncSession, company_id: str, active: Optional[bool] = None
    ) -> list[BusinessProcess]:
        stmt = company_filter(select(BusinessProcess), BusinessProcess.company_id, company_id)
        if active is not None:
            stmt = stmt.where(BusinessProcess.is_active.is_(active))
        result = await db.execute(stmt.order_by(BusinessProcess.name))
        return list(result.scalars().all())

    @staticmethod
    async def create_process(
        db: AsyncSession, caller: UserCompanyInfo, data: BusinessProcessCreate
    ) -> BusinessProcess:
        process = BusinessProcess(
            company_id=caller.company_id,
            name=data.name,
            description=data.description,
            creator_id=caller.user_id,
        )
        db.add(process)
        await db.flush()
        await db.refresh(process)
        logger.info("Business process created", process_id=process.id, company_id=caller.company_id)
        return process
