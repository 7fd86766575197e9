"""
services/feedback_service.py
----------------------------
Business logic for peer feedback (gratitudes and remarks).

A user's score is gratitudes minus remarks.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.errors import InvalidReference
from taskhub.core.logging import get_logger
from taskhub.models.feedback import Feedback, FeedbackType
from taskhub.models.user import User
from taskhub.schemas.feedback import FeedbackCreate, FeedbackPeriod, FeedbackStats
from taskhub.services.tenancy import (
    UserCompanyInfo,
    company_filter,
    validate_task_access,
    validate_user_access,
    validate_users_access,
)

logger = get_logger(__name__)

_PERIOD_DAYS = {FeedbackPeriod.week: 7, FeedbackPeriod.month: 30}


class FeedbackService:

    @staticmethod
    async def list_feedback(
        db: AsyncSession,
        company_id: str,
        type: Optional[FeedbackType] = None,
        user_id: Optional[str] = None,
        period: FeedbackPeriod = FeedbackPeriod.all,
    ) -> list[Feedback]:
        """Feedback given or received by user_id (if set) within the period."""
        if user_id and not await validate_user_access(db, user_id, company_id):
            raise InvalidReference("User not found or not from the same company")

        stmt = company_filter(select(Feedback), Feedback.company_id, company_id)
        if type is not None:
            stmt = stmt.where(Feedback.type == type.value)
        if user_id:
            stmt = stmt.where(
                or_(Feedback.to_user_id == user_id, Feedback.from_user_id == user_id)
            )
        if period in _PERIOD_DAYS:
            since = datetime.now(timezone.utc) - timedelta(days=_PERIOD_DAYS[period])
            stmt = stmt.where(Feedback.created_at >= since)

        result = await db.execute(stmt.order_by(Feedback.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def create_feedback(
        db: AsyncSession, caller: UserCompanyInfo, data: FeedbackCreate
    ) -> Feedback:
        company_id = caller.company_id
        if not await validate_user_access(db, data.to_user_id, company_id):
            raise InvalidReference("Recipient not found or not from the same company")
        if data.task_id and not await validate_task_access(db, data.task_id, company_id):
            raise InvalidReference("Task not found or not accessible")

        feedback = Feedback(
            company_id=company_id,
            type=data.type.value,
            from_user_id=caller.user_id,
            to_user_id=data.to_user_id,
            task_id=data.task_id,
            message=data.message,
        )
        db.add(feedback)
        await db.flush()
        await db.refresh(feedback)
        logger.info(
            "Feedback recorded",
            feedback_id=feedback.id,
            type=feedback.type,
            company_id=company_id,
        )
        return feedback

    @staticmethod
    async def get_stats(
        db: AsyncSession, company_id: str, user_ids: Sequence[str]
    ) -> list[FeedbackStats]:
        """Gratitude/remark counts per user, highest score first."""
        unique_ids = list(dict.fromkeys(user_ids))
        if not unique_ids:
            return []
        if not await validate_users_access(db, unique_ids, company_id):
            raise InvalidReference("Some users are not from the same company")

        users = await db.execute(
            company_filter(select(User).where(User.id.in_(unique_ids)), User.company_id, company_id)
        )
        counts = await db.execute(
            select(Feedback.to_user_id, Feedback.type, func.count())
            .where(Feedback.company_id == company_id, Feedback.to_user_id.in_(unique_ids))
            .group_by(Feedback.to_user_id, Feedback.type)
        )
        tally: dict[tuple[str, str], int] = {
            (to_user_id, kind): count for to_user_id, kind, count in counts.all()
        }

        stats = []
        for user in users.scalars().all():
            gratitudes = tally.get((user.id, FeedbackType.gratitude.value), 0)
            remarks = tally.get((user.id, FeedbackType.remark.value), 0)
            stats.append(FeedbackStats(
                user_id=user.id,
                name=user.name,
                avatar=user.avatar,
                gratitudes=gratitudes,
                remarks=remarks,
                score=gratitudes - remarks,
            ))
        stats.sort(key=lambda s: (-s.score, s.name))
        return stats
