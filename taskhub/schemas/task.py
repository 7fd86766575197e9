"""
schemas/task.py
---------------
Pydantic models for tasks, status changes, history and tags.

Every id accepted here (assignees, observers, process) is validated against
the caller's company in the service layer before it is persisted.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from taskhub.models.task import TaskStatus, TaskType
from taskhub.schemas.business_process import BusinessProcessBrief
from taskhub.schemas.checklist import ChecklistItemRead
from taskhub.schemas.comment import CommentRead
from taskhub.schemas.user import UserBrief


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    priority: int = Field(default=3, ge=1, le=5)
    type: TaskType = TaskType.one_time
    due_date: Optional[datetime] = None
    assignee_ids: list[str] = Field(default_factory=list)
    observer_ids: list[str] = Field(default_factory=list)
    process_id: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    checklist: list[str] = Field(
        default_factory=list,
        description="Texts of initial checklist items, in order",
    )


class TaskUpdate(BaseModel):
    """Partial update; only fields present in the body are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    priority: Optional[int] = Field(default=None, ge=1, le=5)
    type: Optional[TaskType] = None
    due_date: Optional[datetime] = None
    assignee_ids: Optional[list[str]] = None
    observer_ids: Optional[list[str]] = None
    process_id: Optional[str] = None
    tags: Optional[list[str]] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    actual_hours: Optional[float] = Field(default=None, ge=0)
    result: Optional[str] = None
    is_overdue: Optional[bool] = None
    is_almost_overdue: Optional[bool] = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus
    result: Optional[str] = None
    actual_hours: Optional[float] = Field(default=None, ge=0)


class HistoryRead(BaseModel):
    id: str
    task_id: str
    action_type: str
    user_id: Optional[str] = None
    description: Optional[str] = None
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class TaskRead(BaseModel):
    id: str
    company_id: str
    title: str
    description: Optional[str] = None
    priority: int
    status: str
    type: str
    creator_id: Optional[str] = None
    responsible_id: Optional[str] = None
    process_id: Optional[str] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    tags: list[str] = Field(default_factory=list)
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    result: Optional[str] = None
    is_overdue: bool
    is_almost_overdue: bool
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    assignee_ids: list[str] = Field(default_factory=list)
    observer_ids: list[str] = Field(default_factory=list)
    assignees: list[UserBrief] = Field(default_factory=list)
    observers: list[UserBrief] = Field(default_factory=list)
    creator: Optional[UserBrief] = None
    responsible: Optional[UserBrief] = None
    process: Optional[BusinessProcessBrief] = None

    model_config = {"from_attributes": True}


class TaskDetail(TaskRead):
    comments: list[CommentRead] = Field(default_factory=list)
    checklist: list[ChecklistItemRead] = Field(default_factory=list)
    history: list[HistoryRead] = Field(default_factory=list)


class TaskTrashResponse(BaseModel):
    id: str
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None

    model_config = {"from_attributes": True}


class TagRead(BaseModel):
    name: str
    count: Optional[int] = None


class TagList(BaseModel):
    data: list[TagRead]
    total: int
