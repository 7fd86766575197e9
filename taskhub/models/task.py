"""
models/task.py
--------------
Task ORM model, its assignee/observer link tables and the audit history.

Soft delete: is_deleted / deleted_at / deleted_by mark a task as "in trash".
A trashed task is read-only until restored; permanent deletion is only
possible from the trash.

Relationships used by response schemas are loaded with lazy="selectin" so
they are available in async context without implicit IO.
"""

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskhub.db.base import Base, CompanyScoped, TimestampMixin


class TaskStatus(str, PyEnum):
    new = "new"
    acknowledged = "acknowledged"
    in_progress = "in_progress"
    paused = "paused"
    waiting_control = "waiting_control"
    on_control = "on_control"
    completed = "completed"


class TaskType(str, PyEnum):
    one_time = "one_time"
    recurring = "recurring"


class HistoryAction(str, PyEnum):
    created = "created"
    status_changed = "status_changed"
    comment_added = "comment_added"
    comment_edited = "comment_edited"
    comment_deleted = "comment_deleted"
    checklist_updated = "checklist_updated"
    soft_deleted = "soft_deleted"
    restored = "restored"


task_assignees = Table(
    "task_assignees",
    Base.metadata,
    Column("task_id", String(36), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

task_observers = Table(
    "task_observers",
    Base.metadata,
    Column("task_id", String(36), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Task(Base, CompanyScoped, TimestampMixin):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=TaskStatus.new.value, index=True
    )
    type: Mapped[str] = mapped_column(
        String(32), nullable=False, default=TaskType.one_time.value
    )

    creator_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    responsible_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    process_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("business_processes.id", ondelete="SET NULL"), nullable=True
    )

    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    estimated_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    actual_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    result: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_overdue: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_almost_overdue: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    # Relationships
    assignees: Mapped[list["User"]] = relationship(  # noqa: F821
        "User", secondary=task_assignees, lazy="selectin"
    )
    observers: Mapped[list["User"]] = relationship(  # noqa: F821
        "User", secondary=task_observers, lazy="selectin"
    )
    creator: Mapped[Optional["User"]] = relationship(  # noqa: F821
        "User", foreign_keys=[creator_id], lazy="selectin"
    )
    responsible: Mapped[Optional["User"]] = relationship(  # noqa: F821
        "User", foreign_keys=[responsible_id], lazy="selectin"
    )
    process: Mapped[Optional["BusinessProcess"]] = relationship(  # noqa: F821
        "BusinessProcess", lazy="selectin"
    )

    @property
    def assignee_ids(self) -> list[str]:
        return [user.id for user in self.assignees]

    @property
    def observer_ids(self) -> list[str]:
        return [user.id for user in self.observers]

    def __repr__(self) -> str:
        return f"<Task id={self.id} status={self.status} company_id={self.company_id}>"


class HistoryEntry(Base):
    __tablename__ = "history_entries"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    task_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    action_type: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    old_value: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    new_value: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<HistoryEntry task_id={self.task_id} action={self.action_type}>"
