"""
models/user.py
--------------
User ORM model with roles, company binding and Telegram identity.

Role design:
  - 'director':        Manages users, groups and any task of the company.
  - 'department_head': Manages tasks (including the trash) of the company.
  - 'employee':        Works on tasks; edits only their own profile.
  - 'admin':           Platform operator; provisions companies.

A user with company_id = NULL has no tenant-scoped access to anything.
Accounts are provisioned out-of-band; Telegram login never creates one.
"""

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, Optional

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from taskhub.db.base import Base, TimestampMixin


class UserRole(str, PyEnum):
    director = "director"
    department_head = "department_head"
    employee = "employee"
    admin = "admin"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[Optional[str]] = mapped_column(
        String(255), unique=True, nullable=True, index=True
    )
    avatar: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.employee.value
    )
    position: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    simplified_control: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notification_settings: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    company_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("companies.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    telegram_user_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, unique=True, nullable=True, index=True
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} role={self.role} company_id={self.company_id}>"
