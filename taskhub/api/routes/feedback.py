"""
api/routes/feedback.py
----------------------
Peer feedback endpoints.

GET  /api/feedback         - Feedback list (type / user / period filters).
POST /api/feedback         - Give a gratitude or a remark.
GET  /api/feedback/stats   - Per-user counts and score for ?user_ids=a,b.
"""

from typing import Optional

from fastapi import APIRouter, status

from taskhub.dependencies import DbSession, TenantCaller
from taskhub.models.feedback import FeedbackType
from taskhub.schemas.feedback import (
    FeedbackCreate,
    FeedbackPeriod,
    FeedbackRead,
    FeedbackStats,
)
from taskhub.services.feedback_service import FeedbackService

router = APIRouter(prefix="/api/feedback", tags=["Feedback"])


@router.get("", response_model=list[FeedbackRead], summary="List feedback")
async def list_feedback(
    db: DbSession,
    caller: TenantCaller,
    type: Optional[FeedbackType] = None,
    user_id: Optional[str] = None,
    period: FeedbackPeriod = FeedbackPeriod.all,
) -> list[FeedbackRead]:
    entries = await FeedbackService.list_feedback(
        db, caller.company_id, type=type, user_id=user_id, period=period
    )
    return [FeedbackRead.model_validate(f) for f in entries]


@router.post(
    "",
    response_model=FeedbackRead,
    status_code=status.HTTP_201_CREATED,
    summary="Give feedback to a colleague",
)
async def create_feedback(
    body: FeedbackCreate, db: DbSession, caller: TenantCaller
) -> FeedbackRead:
    feedback = await FeedbackService.create_feedback(db, caller, body)
    return FeedbackRead.model_validate(feedback)


@router.get("/stats", response_model=list[FeedbackStats], summary="Feedback statistics")
async def feedback_stats(
    db: DbSession, caller: TenantCaller, user_ids: str = ""
) -> list[FeedbackStats]:
    ids = [part.strip() for part in user_ids.split(",") if part.strip()]
    return await FeedbackService.get_stats(db, caller.company_id, ids)
