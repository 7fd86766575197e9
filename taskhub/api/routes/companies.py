"""
api/routes/companies.py
-----------------------
Company (tenant) endpoints.

GET  /api/companies/current  - Caller's company with director and employees.
GET  /api/companies          - Admin: list all companies.
POST /api/companies          - Admin: create a company and attach users.
"""

from fastapi import APIRouter, status

from taskhub.dependencies import AdminCaller, DbSession, TenantCaller
from taskhub.schemas.company import CompanyCreate, CompanyDetail, CompanyRead
from taskhub.services.company_service import CompanyService

router = APIRouter(prefix="/api/companies", tags=["Companies"])


@router.get(
    "/current",
    response_model=CompanyDetail,
    summary="Get the caller's company",
)
async def get_current_company(db: DbSession, caller: TenantCaller) -> CompanyDetail:
    return await CompanyService.get_company_detail(db, caller.company_id)


@router.get(
    "",
    response_model=list[CompanyRead],
    summary="Admin: list all companies",
)
async def list_companies(db: DbSession, admin: AdminCaller) -> list[CompanyRead]:
    companies = await CompanyService.list_companies(db)
    return [CompanyRead.model_validate(c) for c in companies]


@router.post(
    "",
    response_model=CompanyRead,
    status_code=status.HTTP_201_CREATED,
    summary="Admin: create a company",
)
async def create_company(
    body: CompanyCreate, db: DbSession, admin: AdminCaller
) -> CompanyRead:
    company = await CompanyService.create_company(db, body)
    return CompanyRead.model_validate(company)
