"""
schemas/feedback.py
-------------------
Pydantic models for peer feedback and per-user feedback statistics.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from taskhub.models.feedback import FeedbackType


class FeedbackPeriod(str, Enum):
    week = "week"
    month = "month"
    all = "all"


class FeedbackCreate(BaseModel):
    type: FeedbackType
    to_user_id: str
    task_id: Optional[str] = None
    message: str = Field(..., min_length=1, max_length=4000)


class FeedbackRead(BaseModel):
    id: str
    company_id: str
    type: str
    from_user_id: Optional[str] = None
    to_user_id: str
    task_id: Optional[str] = None
    message: str
    is_automatic: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class FeedbackStats(BaseModel):
    user_id: str
    name: str
    avatar: Optional[str] = None
    gratitudes: int
    remarks: int
    score: int
