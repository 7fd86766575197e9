"""
schemas/business_process.py
---------------------------
Pydantic models for business processes.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BusinessProcessCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class BusinessProcessRead(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    creator_id: Optional[str] = None
    is_active: bool
    company_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BusinessProcessBrief(BaseModel):
    id: str
    name: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}
