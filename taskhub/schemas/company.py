"""
schemas/company.py
------------------
Pydantic request/response models for Company (tenant).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from taskhub.models.company import CompanyPlan
from taskhub.schemas.user import UserBrief


class CompanyCreate(BaseModel):
    director_telegram_user_id: Optional[int] = None
    director_telegram_username: Optional[str] = Field(default=None, max_length=255)
    director_app_user_id: Optional[str] = None
    plan: CompanyPlan = CompanyPlan.free
    employee_user_ids: list[str] = Field(default_factory=list)


class CompanyRead(BaseModel):
    id: str
    director_telegram_user_id: Optional[int] = None
    director_telegram_username: Optional[str] = None
    director_app_user_id: Optional[str] = None
    plan: str
    employee_user_ids: list[str] = Field(default_factory=list)
    connected_at: datetime
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CompanyDetail(CompanyRead):
    director: Optional[UserBrief] = None
    employees: list[UserBrief] = Field(default_factory=list)
