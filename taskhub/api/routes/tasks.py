"""
api/routes/tasks.py
-------------------
Task endpoints.

GET    /api/tasks                - Filtered list of company tasks.
POST   /api/tasks                - Create a task.
GET    /api/tasks/{id}           - Task with comments, checklist and history.
PUT    /api/tasks/{id}           - Partial update (not allowed while in trash).
PUT    /api/tasks/{id}/status    - Change status.
POST   /api/tasks/{id}/delete    - Move to trash.
PUT    /api/tasks/{id}/delete    - Restore from trash.
DELETE /api/tasks/{id}/delete    - Delete permanently (trash only).
GET    /api/tags                 - Distinct tags of live tasks.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query, status

from taskhub.dependencies import DbSession, TenantCaller
from taskhub.models.task import TaskStatus
from taskhub.schemas.task import (
    TagList,
    TaskCreate,
    TaskDetail,
    TaskRead,
    TaskStatusUpdate,
    TaskTrashResponse,
    TaskUpdate,
)
from taskhub.services.task_service import TaskService

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])
tags_router = APIRouter(prefix="/api/tags", tags=["Tasks"])


@router.get("", response_model=list[TaskRead], summary="List company tasks")
async def list_tasks(
    db: DbSession,
    caller: TenantCaller,
    status_filter: Annotated[Optional[TaskStatus], Query(alias="status")] = None,
    assigned_to: Optional[str] = None,
    created_by: Optional[str] = None,
    process_id: Optional[str] = None,
    overdue: Optional[bool] = None,
    almost_overdue: Optional[bool] = None,
    include_deleted: bool = False,
) -> list[TaskRead]:
    tasks = await TaskService.list_tasks(
        db,
        caller.company_id,
        status=status_filter.value if status_filter else None,
        assigned_to=assigned_to,
        created_by=created_by,
        process_id=process_id,
        overdue=overdue,
        almost_overdue=almost_overdue,
        include_deleted=include_deleted,
    )
    return [TaskRead.model_validate(t) for t in tasks]


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(body: TaskCreate, db: DbSession, caller: TenantCaller) -> TaskRead:
    task = await TaskService.create_task(db, caller, body)
    return TaskRead.model_validate(task)


@router.get("/{task_id}", response_model=TaskDetail, summary="Get a task")
async def get_task(task_id: str, db: DbSession, caller: TenantCaller) -> TaskDetail:
    """A task of another company is reported as not found."""
    return await TaskService.get_task_detail(db, task_id, caller.company_id)


@router.put("/{task_id}", response_model=TaskRead, summary="Update a task")
async def update_task(
    task_id: str, body: TaskUpdate, db: DbSession, caller: TenantCaller
) -> TaskRead:
    task = await TaskService.update_task(db, caller, task_id, body)
    return TaskRead.model_validate(task)


@router.put("/{task_id}/status", response_model=TaskRead, summary="Change task status")
async def update_task_status(
    task_id: str, body: TaskStatusUpdate, db: DbSession, caller: TenantCaller
) -> TaskRead:
    task = await TaskService.update_status(db, caller, task_id, body)
    return TaskRead.model_validate(task)


@router.post(
    "/{task_id}/delete",
    response_model=TaskTrashResponse,
    summary="Move a task to the trash",
)
async def soft_delete_task(
    task_id: str, db: DbSession, caller: TenantCaller
) -> TaskTrashResponse:
    task = await TaskService.soft_delete(db, caller, task_id)
    return TaskTrashResponse.model_validate(task)


@router.put(
    "/{task_id}/delete",
    response_model=TaskTrashResponse,
    summary="Restore a task from the trash",
)
async def restore_task(
    task_id: str, db: DbSession, caller: TenantCaller
) -> TaskTrashResponse:
    task = await TaskService.restore(db, caller, task_id)
    return TaskTrashResponse.model_validate(task)


@router.delete(
    "/{task_id}/delete",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Permanently delete a task from the trash",
)
async def delete_task_permanently(
    task_id: str, db: DbSession, caller: TenantCaller
) -> None:
    await TaskService.delete_permanently(db, caller, task_id)


@tags_router.get("", response_model=TagList, summary="List task tags")
async def list_tags(
    db: DbSession,
    caller: TenantCaller,
    search: Optional[str] = None,
    limit: Annotated[int, Query(ge=0, le=500)] = 50,
    include_count: bool = False,
) -> TagList:
    tags = await TaskService.list_tags(
        db, caller.company_id, search=search, limit=limit, include_count=include_count
    )
    return TagList(data=tags, total=len(tags))
