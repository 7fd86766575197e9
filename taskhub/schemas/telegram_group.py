"""
schemas/telegram_group.py
-------------------------
Pydantic models for company Telegram group bindings.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from taskhub.schemas.user import UserBrief


class TelegramGroupUpdate(BaseModel):
    id: str
    is_active: Optional[bool] = None
    default_assignee_option: Optional[str] = None


class TelegramGroupRead(BaseModel):
    id: str
    chat_id: int
    title: Optional[str] = None
    provider_type: str
    is_active: bool
    default_assignee_option: Optional[str] = None
    default_assignee: Optional[UserBrief] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
