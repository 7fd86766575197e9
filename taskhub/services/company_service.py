"""
services/company_service.py
---------------------------
Business logic for company (tenant) management.

Service layer is responsible for:
  - Constructing queries
  - Enforcing business rules (referenced users must exist)
  - Returning domain objects (ORM models) to the route layer
  - Never returning HTTP responses (that's the route's job)
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.errors import EntityNotFound, InvalidReference
from taskhub.core.logging import get_logger
from taskhub.models.company import Company
from taskhub.models.user import User, UserRole
from taskhub.schemas.company import CompanyCreate, CompanyDetail
from taskhub.schemas.user import UserBrief

logger = get_logger(__name__)


class CompanyService:

    @staticmethod
    async def get_company_detail(db: AsyncSession, company_id: str) -> CompanyDetail:
        """The caller's company with its director and employee roster."""
        result = await db.execute(select(Company).where(Company.id == company_id))
        company = result.scalar_one_or_none()
        if company is None:
            raise EntityNotFound("Company not found")

        users_result = await db.execute(
            select(User).where(User.company_id == company_id).order_by(User.name)
        )
        employees = list(users_result.scalars().all())

        director = next(
            (u for u in employees if u.id == company.director_app_user_id), None
        ) or next((u for u in employees if u.role == UserRole.director.value), None)

        detail = CompanyDetail.model_validate(company)
        detail.director = UserBrief.model_validate(director) if director else None
        detail.employees = [UserBrief.model_validate(u) for u in employees]
        return detail

    @staticmethod
    async def list_companies(db: AsyncSession) -> list[Company]:
        result = await db.execute(select(Company).order_by(Company.created_at))
        return list(result.scalars().all())

    @staticmethod
    async def create_company(db: AsyncSession, data: CompanyCreate) -> Company:
        """
        Create a company and attach the listed users to it.

        Only users without a company can be attached. Raises InvalidReference
        if any listed user (or the director) does not exist or already
        belongs to a company.
        """
        member_ids = list(dict.fromkeys(data.employee_user_ids))
        if data.director_app_user_id and data.director_app_user_id not in member_ids:
            member_ids.append(data.director_app_user_id)

        if member_ids:
            found = await db.execute(
                select(User.id).where(User.id.in_(member_ids), User.company_id.is_(None))
            )
            if len(found.all()) != len(member_ids):
                raise InvalidReference("Some users do not exist or already belong to a company")

        company = Company(
            director_telegram_user_id=data.director_telegram_user_id,
            director_telegram_username=data.director_telegram_username,
            director_app_user_id=data.director_app_user_id,
            plan=data.plan.value,
            employee_user_ids=member_ids,
        )
        db.add(company)
        await db.flush()

        if member_ids:
            await db.execute(
                update(User)
                .where(User.id.in_(member_ids), User.company_id.is_(None))
                .values(company_id=company.id)
                .execution_options(synchronize_session="fetch")
            )
        await db.refresh(company)
        logger.info("Company created", company_id=company.id, members=len(member_ids))
        return company
