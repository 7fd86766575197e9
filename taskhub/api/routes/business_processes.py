"""
api/routes/business_processes.py
--------------------------------
GET  /api/business-processes  - Company processes (optionally ?active=).
POST /api/business-processes  - Create a process.
"""

from typing import Optional

from fastapi import APIRouter, status

from taskhub.dependencies import DbSession, TenantCaller
from taskhub.schemas.business_process import BusinessProcessCreate, BusinessProcessRead
from taskhub.services.business_process_service import BusinessProcessService

router = APIRouter(prefix="/api/business-processes", tags=["Business processes"])


@router.get("", response_model=list[BusinessProcessRead], summary="List business processes")
async def list_processes(
    db: DbSession, caller: TenantCaller, active: Optional[bool] = None
) -> list[BusinessProcessRead]:
    processes = await BusinessProcessService.list_processes(db, caller.company_id, active=active)
    return [BusinessProcessRead.model_validate(p) for p in processes]


@router.post(
    "",
    response_model=BusinessProcessRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a business process",
)
async def create_process(
    body: BusinessProcessCreate, db: DbSession, caller: TenantCaller
) -> BusinessProcessRead:
    process = await BusinessProcessService.create_process(db, caller, body)
    return BusinessProcessRead.model_validate(process)
