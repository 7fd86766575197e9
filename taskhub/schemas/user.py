"""
schemas/user.py
---------------
Pydantic models for user management and responses.

Naming convention:
  UserCreate  → inbound body (director creates a colleague)
  UserUpdate  → inbound partial update
  UserRead    → outbound full profile
  UserBrief   → outbound embedded reference (creator, assignee, author ...)
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field

from taskhub.models.user import UserRole

# Fields a user may change on their own profile without director rights
SELF_SERVICE_FIELDS = frozenset({
    "name",
    "username",
    "avatar",
    "position",
    "email",
    "phone",
    "simplified_control",
    "notification_settings",
})


class UserBrief(BaseModel):
    id: str
    name: str
    avatar: Optional[str] = None
    role: str
    position: Optional[str] = None

    model_config = {"from_attributes": True}


class UserRead(BaseModel):
    id: str
    name: str
    username: Optional[str] = None
    avatar: Optional[str] = None
    role: str
    position: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    simplified_control: bool
    notification_settings: Optional[dict[str, Any]] = None
    company_id: Optional[str] = None
    telegram_user_id: Optional[int] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserCreate(BaseModel):
    """Used by a director to provision a colleague in their company."""
    name: str = Field(..., min_length=1, max_length=255)
    username: Optional[str] = Field(default=None, max_length=255)
    avatar: Optional[str] = None
    role: UserRole = UserRole.employee
    position: Optional[str] = Field(default=None, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=64)
    telegram_user_id: Optional[int] = None


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    username: Optional[str] = Field(default=None, max_length=255)
    avatar: Optional[str] = None
    role: Optional[UserRole] = None
    position: Optional[str] = Field(default=None, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=64)
    is_active: Optional[bool] = None
    simplified_control: Optional[bool] = None
    notification_settings: Optional[dict[str, Any]] = None
