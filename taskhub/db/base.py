"""
db/base.py
----------
Declarative base and shared mixins.

TimestampMixin:  Adds created_at / updated_at columns to any model.
CompanyScoped:   Adds the company_id foreign key every tenant-scoped table
                 carries. It is the only isolation boundary, so every query
                 against such a table must filter on it.
UUID keys are stored as String(36) so the schema runs on PostgreSQL and SQLite.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class TimestampMixin:
    """Adds server-side created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class CompanyScoped:
    """Non-nullable, indexed company_id for tenant-owned rows."""

    @declared_attr
    def company_id(cls) -> Mapped[str]:
        return mapped_column(
            String(36),
            ForeignKey("companies.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


def generate_uuid() -> str:
    return str(uuid.uuid4())
