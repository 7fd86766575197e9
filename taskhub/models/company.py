"""
models/company.py
-----------------
Company (tenant) ORM model.

Each company is an isolated organisational unit. All data belonging to a
company is scoped by company_id at the query level; never trust
application-level filtering alone, always include company_id in WHERE clauses.
"""

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import JSON, BigInteger, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from taskhub.db.base import Base, TimestampMixin


class CompanyPlan(str, PyEnum):
    free = "free"
    pro = "pro"


class Company(Base, TimestampMixin):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    director_telegram_user_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    director_telegram_username: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # Soft reference: users.company_id already points here
    director_app_user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    plan: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CompanyPlan.free.value
    )
    employee_user_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    connected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<Company id={self.id} plan={self.plan}>"
