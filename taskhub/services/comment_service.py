"""
services/comment_service.py
---------------------------
Business logic for task comments.

Comments inherit the task's company_id; every lookup filters on it and on
the parent task id, so a comment id from another task or tenant is a 404.
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.errors import EntityNotFound
from taskhub.core.logging import get_logger
from taskhub.models.comment import Comment
from taskhub.models.task import HistoryAction, HistoryEntry
from taskhub.schemas.comment import CommentCreate, CommentUpdate
from taskhub.services.task_service import load_live_task, load_task
from taskhub.services.tenancy import UserCompanyInfo

logger = get_logger(__name__)


async def _load_comment(
    db: AsyncSession, task_id: str, comment_id: str, company_id: str
) -> Comment:
    result = await db.execute(
        select(Comment).where(
            Comment.id == comment_id,
            Comment.task_id == task_id,
            Comment.company_id == company_id,
        )
    )
    comment = result.scalar_one_or_none()
    if comment is None:
        raise EntityNotFound("Comment not found")
    return comment


class CommentService:

    @staticmethod
    async def list_comments(db: AsyncSession, task_id: str, company_id: str) -> list[Comment]:
        task = await load_task(db, task_id, company_id)
        result = await db.execute(
            select(Comment)
            .where(Comment.task_id == task.id, Comment.company_id == company_id)
            .order_by(Comment.created_at)
        )
        return list(result.scalars().all())

    @staticmethod
    async def add_comment(
        db: AsyncSession, caller: UserCompanyInfo, task_id: str, data: CommentCreate
    ) -> Comment:
        task = await load_live_task(db, task_id, caller.company_id)
        comment = Comment(
            task_id=task.id,
            company_id=caller.company_id,
            author_id=caller.user_id,
            text=data.text,
            is_result=data.is_result,
        )
        db.add(comment)
        await db.flush()
        db.add(HistoryEntry(
            task_id=task.id,
            action_type=HistoryAction.comment_added.value,
            user_id=caller.user_id,
            description="Comment added",
            new_value={"comment_id": comment.id},
        ))
        await db.flush()
        await db.refresh(comment)
        logger.info("Comment added", comment_id=comment.id, task_id=task.id)
        return comment

    @staticmethod
    async def edit_comment(
        db: AsyncSession,
        caller: UserCompanyInfo,
        task_id: str,
        comment_id: str,
        data: CommentUpdate,
    ) -> Comment:
        task = await load_live_task(db, task_id, caller.company_id)
        comment = await _load_comment(db, task.id, comment_id, caller.company_id)

        comment.text = data.text
        comment.is_edited = True
        comment.edited_at = datetime.now(timezone.utc)
        db.add(HistoryEntry(
            task_id=task.id,
            action_type=HistoryAction.comment_edited.value,
            user_id=caller.user_id,
            description="Comment edited",
            new_value={"comment_id": comment.id},
        ))
        await db.flush()
        await db.refresh(comment)
        return comment

    @staticmethod
    async def delete_comment(
        db: AsyncSession, caller: UserCompanyInfo, task_id: str, comment_id: str
    ) -> None:
        task = await load_live_task(db, task_id, caller.company_id)
        comment = await _load_comment(db, task.id, comment_id, caller.company_id)

        await db.delete(comment)
        db.add(HistoryEntry(
            task_id=task.id,
            action_type=HistoryAction.comment_deleted.value,
            user_id=caller.user_id,
            description="Comment deleted",
            old_value={"comment_id": comment_id},
        ))
        await db.flush()
        logger.info("Comment deleted", comment_id=comment_id, task_id=task.id)
