"""
api/routes/comments.py
----------------------
Task comment endpoints. Writes on a task in the trash are refused (403).

GET    /api/tasks/{id}/comments
POST   /api/tasks/{id}/comments
PUT    /api/tasks/{id}/comments/{comment_id}
DELETE /api/tasks/{id}/comments/{comment_id}
"""

from fastapi import APIRouter, status

from taskhub.dependencies import DbSession, TenantCaller
from taskhub.schemas.comment import CommentCreate, CommentRead, CommentUpdate
from taskhub.services.comment_service import CommentService

router = APIRouter(prefix="/api/tasks/{task_id}/comments", tags=["Comments"])


@router.get("", response_model=list[CommentRead], summary="List task comments")
async def list_comments(task_id: str, db: DbSession, caller: TenantCaller) -> list[CommentRead]:
    comments = await CommentService.list_comments(db, task_id, caller.company_id)
    return [CommentRead.model_validate(c) for c in comments]


@router.post(
    "",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment",
)
async def add_comment(
    task_id: str, body: CommentCreate, db: DbSession, caller: TenantCaller
) -> CommentRead:
    comment = await CommentService.add_comment(db, caller, task_id, body)
    return CommentRead.model_validate(comment)


@router.put("/{comment_id}", response_model=CommentRead, summary="Edit a comment")
async def edit_comment(
    task_id: str,
    comment_id: str,
    body: CommentUpdate,
    db: DbSession,
    caller: TenantCaller,
) -> CommentRead:
    comment = await CommentService.edit_comment(db, caller, task_id, comment_id, body)
    return CommentRead.model_validate(comment)


@router.delete(
    "/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a comment",
)
async def delete_comment(
    task_id: str, comment_id: str, db: DbSession, caller: TenantCaller
) -> None:
    await CommentService.delete_comment(db, caller, task_id, comment_id)
