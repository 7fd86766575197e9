"""
services/task_service.py
------------------------
Business logic for tasks, their lifecycle and the trash.

Critical security invariant:
  Every query includes company_id, and every id taken from the request
  (assignees, observers, process, filter values) is validated against the
  caller's company before it is used.

Each public method runs inside the request transaction opened by get_db, so
a change and its history entry are committed (or rolled back) together.
"""

from collections import Counter
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Sequence

from fastapi.encoders import jsonable_encoder
from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.errors import (
    AccessDenied,
    AlreadyInTargetState,
    EntityNotFound,
    InvalidReference,
    TaskInTrash,
    TaskNotInTrash,
)
from taskhub.core.logging import get_logger
from taskhub.models.checklist import ChecklistItem
from taskhub.models.comment import Comment
from taskhub.models.feedback import Feedback
from taskhub.models.notification import Notification
from taskhub.models.task import (
    HistoryAction,
    HistoryEntry,
    Task,
    TaskStatus,
    task_assignees,
    task_observers,
)
from taskhub.models.user import User, UserRole
from taskhub.schemas.checklist import ChecklistItemRead
from taskhub.schemas.comment import CommentRead
from taskhub.schemas.task import (
    HistoryRead,
    TagRead,
    TaskCreate,
    TaskDetail,
    TaskStatusUpdate,
    TaskUpdate,
)
from taskhub.services.tenancy import (
    UserCompanyInfo,
    company_filter,
    validate_business_process_access,
    validate_task_access,
    validate_user_access,
    validate_users_access,
)

logger = get_logger(__name__)

TRASH_MANAGER_ROLES = (UserRole.director.value, UserRole.department_head.value)

# Columns that cannot be cleared; an explicit null for them is ignored
NON_NULLABLE_FIELDS = frozenset({"title", "priority", "type", "tags", "is_overdue", "is_almost_overdue"})


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Any) -> Any:
    """Aware UTC copy of a datetime; naive values (as SQLite returns them) are taken as UTC."""
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _history(
    task: Task,
    action_type: str,
    user_id: str,
    description: str,
    old_value: Any = None,
    new_value: Any = None,
) -> HistoryEntry:
    return HistoryEntry(
        task_id=task.id,
        action_type=action_type,
        user_id=user_id,
        description=description,
        old_value=jsonable_encoder(old_value),
        new_value=jsonable_encoder(new_value),
    )


async def load_task(db: AsyncSession, task_id: str, company_id: str) -> Task:
    """
    Return the task if it belongs to company_id.

    Raises EntityNotFound otherwise, whether the task is missing or owned
    by another company.
    """
    if not await validate_task_access(db, task_id, company_id):
        raise EntityNotFound("Task not found")
    result = await db.execute(
        company_filter(select(Task).where(Task.id == task_id), Task.company_id, company_id)
    )
    return result.scalar_one()


async def load_live_task(db: AsyncSession, task_id: str, company_id: str) -> Task:
    """load_task() that additionally refuses tasks sitting in the trash."""
    task = await load_task(db, task_id, company_id)
    if task.is_deleted:
        raise TaskInTrash()
    return task


async def _company_users(
    db: AsyncSession, user_ids: Sequence[str], company_id: str
) -> list[User]:
    """Users for user_ids in request order, all validated against company_id."""
    ordered = list(dict.fromkeys(user_ids))
    if not ordered:
        return []
    if not await validate_users_access(db, ordered, company_id):
        raise InvalidReference("Some users are not from the same company")
    result = await db.execute(
        company_filter(select(User).where(User.id.in_(ordered)), User.company_id, company_id)
    )
    by_id = {user.id: user for user in result.scalars().all()}
    return [by_id[user_id] for user_id in ordered]


async def _check_process(db: AsyncSession, process_id: Optional[str], company_id: str) -> None:
    if process_id and not await validate_business_process_access(db, process_id, company_id):
        raise InvalidReference("Business process not found or not accessible")


class TaskService:

    @staticmethod
    async def list_tasks(
        db: AsyncSession,
        company_id: str,
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
        created_by: Optional[str] = None,
        process_id: Optional[str] = None,
        overdue: Optional[bool] = None,
        almost_overdue: Optional[bool] = None,
        include_deleted: bool = False,
    ) -> list[Task]:
        """Company tasks matching every given filter, soonest due date first."""
        for user_id in (assigned_to, created_by):
            if user_id and not await validate_user_access(db, user_id, company_id):
                raise InvalidReference("Filter user not found or not accessible")
        await _check_process(db, process_id, company_id)

        stmt = company_filter(select(Task), Task.company_id, company_id)
        if not include_deleted:
            stmt = stmt.where(Task.is_deleted.is_(False))
        if status:
            stmt = stmt.where(Task.status == status)
        if assigned_to:
            assigned = select(task_assignees.c.task_id).where(
                task_assignees.c.user_id == assigned_to
            )
            stmt = stmt.where(or_(Task.responsible_id == assigned_to, Task.id.in_(assigned)))
        if created_by:
            stmt = stmt.where(Task.creator_id == created_by)
        if process_id:
            stmt = stmt.where(Task.process_id == process_id)
        if overdue is not None:
            stmt = stmt.where(Task.is_overdue.is_(overdue))
        if almost_overdue is not None:
            stmt = stmt.where(Task.is_almost_overdue.is_(almost_overdue))

        stmt = stmt.order_by(
            Task.due_date.is_(None), Task.due_date.asc(), Task.created_at.desc()
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create_task(
        db: AsyncSession, caller: UserCompanyInfo, data: TaskCreate
    ) -> Task:
        company_id = caller.company_id
        assignees = await _company_users(db, data.assignee_ids, company_id)
        observers = await _company_users(db, data.observer_ids, company_id)
        await _check_process(db, data.process_id, company_id)

        task = Task(
            company_id=company_id,
            title=data.title,
            description=data.description,
            priority=data.priority,
            status=TaskStatus.new.value,
            type=data.type.value,
            creator_id=caller.user_id,
            responsible_id=assignees[0].id if assignees else caller.user_id,
            process_id=data.process_id,
            due_date=_as_utc(data.due_date),
            tags=list(dict.fromkeys(data.tags)),
            estimated_hours=data.estimated_hours,
        )
        task.assignees = assignees
        task.observers = observers
        db.add(task)
        await db.flush()

        for order, text in enumerate(data.checklist):
            db.add(
                ChecklistItem(
                    task_id=task.id,
                    company_id=company_id,
                    text=text,
                    created_by=caller.user_id,
                    item_order=order,
                )
            )
        db.add(
            _history(
                task,
                HistoryAction.created.value,
                caller.user_id,
                "Task created",
                new_value={"title": task.title, "status": task.status},
            )
        )
        await db.flush()
        await db.refresh(task)
        logger.info("Task created", task_id=task.id, company_id=company_id)
        return task

    @staticmethod
    async def get_task_detail(db: AsyncSession, task_id: str, company_id: str) -> TaskDetail:
        task = await load_task(db, task_id, company_id)

        comments = await db.execute(
            select(Comment)
            .where(Comment.task_id == task.id, Comment.company_id == company_id)
            .order_by(Comment.created_at)
        )
        checklist = await db.execute(
            select(ChecklistItem)
            .where(ChecklistItem.task_id == task.id, ChecklistItem.company_id == company_id)
            .order_by(ChecklistItem.item_order)
        )
        history = await db.execute(
            select(HistoryEntry)
            .where(HistoryEntry.task_id == task.id)
            .order_by(HistoryEntry.created_at.desc())
        )

        detail = TaskDetail.model_validate(task)
        detail.comments = [CommentRead.model_validate(c) for c in comments.scalars().all()]
        detail.checklist = [ChecklistItemRead.model_validate(i) for i in checklist.scalars().all()]
        detail.history = [HistoryRead.model_validate(h) for h in history.scalars().all()]
        return detail

    @staticmethod
    async def update_task(
        db: AsyncSession, caller: UserCompanyInfo, task_id: str, data: TaskUpdate
    ) -> Task:
        """
        Apply the fields present in the body. Each changed field gets a
        '<field>_changed' history entry. Replacing the assignees makes the
        first new assignee responsible.
        """
        company_id = caller.company_id
        task = await load_live_task(db, task_id, company_id)
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field not in NON_NULLABLE_FIELDS
        }

        assignee_ids = changes.pop("assignee_ids", None)
        observer_ids = changes.pop("observer_ids", None)
        if "process_id" in changes:
            await _check_process(db, changes["process_id"], company_id)

        entries: list[HistoryEntry] = []

        if assignee_ids is not None:
            assignees = await _company_users(db, assignee_ids, company_id)
            old_ids = task.assignee_ids
            task.assignees = assignees
            task.responsible_id = assignees[0].id if assignees else task.creator_id
            if old_ids != [u.id for u in assignees]:
                entries.append(_history(
                    task, "assignees_changed", caller.user_id, "Assignees changed",
                    old_ids, [u.id for u in assignees],
                ))

        if observer_ids is not None:
            observers = await _company_users(db, observer_ids, company_id)
            old_ids = task.observer_ids
            task.observers = observers
            if old_ids != [u.id for u in observers]:
                entries.append(_history(
                    task, "observers_changed", caller.user_id, "Observers changed",
                    old_ids, [u.id for u in observers],
                ))

        if "tags" in changes and changes["tags"] is not None:
            changes["tags"] = list(dict.fromkeys(changes["tags"]))

        for field, value in changes.items():
            if isinstance(value, Enum):
                value = value.value
            value = _as_utc(value)
            old_value = _as_utc(getattr(task, field))
            if old_value == value:
                continue
            setattr(task, field, value)
            entries.append(_history(
                task, f"{field}_changed", caller.user_id, f"{field} changed",
                old_value, value,
            ))

        for entry in entries:
            db.add(entry)
        await db.flush()
        await db.refresh(task)
        logger.info(
            "Task updated", task_id=task.id, company_id=company_id, changes=len(entries)
        )
        return task

    @staticmethod
    async def update_status(
        db: AsyncSession, caller: UserCompanyInfo, task_id: str, data: TaskStatusUpdate
    ) -> Task:
        task = await load_live_task(db, task_id, caller.company_id)
        old_status = task.status
        new_status = data.status.value

        task.status = new_status
        if new_status == TaskStatus.completed.value:
            if task.completed_at is None:
                task.completed_at = _now()
        elif old_status == TaskStatus.completed.value:
            task.completed_at = None
        if data.result is not None:
            task.result = data.result
        if data.actual_hours is not None:
            task.actual_hours = data.actual_hours

        if old_status != new_status:
            db.add(_history(
                task,
                HistoryAction.status_changed.value,
                caller.user_id,
                f"Status changed from '{old_status}' to '{new_status}'",
                old_status,
                new_status,
            ))
        await db.flush()
        await db.refresh(task)
        logger.info(
            "Task status changed",
            task_id=task.id,
            old_status=old_status,
            new_status=new_status,
        )
        return task

    # ── Trash ────────────────────────────────────────────────────────────────

    @staticmethod
    def _ensure_can_manage_trash(caller: UserCompanyInfo, task: Task) -> None:
        if caller.user_role in TRASH_MANAGER_ROLES or task.creator_id == caller.user_id:
            return
        logger.warning(
            "Trash operation denied",
            task_id=task.id,
            user_id=caller.user_id,
            role=caller.user_role,
        )
        raise AccessDenied("Only a director, a department head or the task creator can do this")

    @staticmethod
    async def soft_delete(db: AsyncSession, caller: UserCompanyInfo, task_id: str) -> Task:
        """Move a task to the trash. A task already in the trash is left untouched."""
        task = await load_task(db, task_id, caller.company_id)
        TaskService._ensure_can_manage_trash(caller, task)
        if task.is_deleted:
            raise AlreadyInTargetState("Task is already in trash")

        task.is_deleted = True
        task.deleted_at = _now()
        task.deleted_by = caller.user_id
        db.add(_history(
            task, HistoryAction.soft_deleted.value, caller.user_id, "Task moved to trash",
            False, True,
        ))
        await db.flush()
        await db.refresh(task)
        logger.info("Task soft-deleted", task_id=task.id, company_id=caller.company_id)
        return task

    @staticmethod
    async def restore(db: AsyncSession, caller: UserCompanyInfo, task_id: str) -> Task:
        task = await load_task(db, task_id, caller.company_id)
        TaskService._ensure_can_manage_trash(caller, task)
        if not task.is_deleted:
            raise AlreadyInTargetState("Task is not in trash")

        task.is_deleted = False
        task.deleted_at = None
        task.deleted_by = None
        db.add(_history(
            task, HistoryAction.restored.value, caller.user_id, "Task restored from trash",
            True, False,
        ))
        await db.flush()
        await db.refresh(task)
        logger.info("Task restored", task_id=task.id, company_id=caller.company_id)
        return task

    @staticmethod
    async def delete_permanently(
        db: AsyncSession, caller: UserCompanyInfo, task_id: str
    ) -> None:
        """
        Remove a trashed task and everything hanging off it. Feedback that
        referenced the task is kept and detached.
        """
        company_id = caller.company_id
        task = await load_task(db, task_id, company_id)
        TaskService._ensure_can_manage_trash(caller, task)
        if not task.is_deleted:
            raise TaskNotInTrash()

        await db.execute(delete(task_assignees).where(task_assignees.c.task_id == task.id))
        await db.execute(delete(task_observers).where(task_observers.c.task_id == task.id))
        for model in (Comment, ChecklistItem, Notification):
            await db.execute(
                delete(model)
                .where(model.task_id == task.id, model.company_id == company_id)
                .execution_options(synchronize_session=False)
            )
        await db.execute(
            delete(HistoryEntry)
            .where(HistoryEntry.task_id == task.id)
            .execution_options(synchronize_session=False)
        )
        await db.execute(
            update(Feedback)
            .where(Feedback.task_id == task.id, Feedback.company_id == company_id)
            .values(task_id=None)
            .execution_options(synchronize_session=False)
        )
        db.expunge(task)
        await db.execute(
            delete(Task)
            .where(Task.id == task_id, Task.company_id == company_id)
            .execution_options(synchronize_session=False)
        )
        logger.info("Task permanently deleted", task_id=task_id, company_id=company_id)

    # ── Tags ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_tags(
        db: AsyncSession,
        company_id: str,
        search: Optional[str] = None,
        limit: int = 50,
        include_count: bool = False,
    ) -> list[TagRead]:
        """Distinct tags of the company's live tasks."""
        stmt = company_filter(select(Task.tags), Task.company_id, company_id)
        result = await db.execute(stmt.where(Task.is_deleted.is_(False)))

        counts: Counter = Counter()
        for tags in result.scalars().all():
            counts.update(set(tags or []))

        needle = (search or "").lower()
        names = [name for name in counts if needle in name.lower()]
        if include_count:
            names.sort(key=lambda name: (-counts[name], name))
        else:
            names.sort()
        if limit > 0:
            names = names[:limit]

        return [
            TagRead(name=name, count=counts[name] if include_count else None)
            for name in names
        ]
