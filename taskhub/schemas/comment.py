"""
schemas/comment.py
------------------
Pydantic models for task comments.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from taskhub.schemas.user import UserBrief


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=20000)
    is_result: bool = False


class CommentUpdate(BaseModel):
    text: str = Field(..., min_length=1, max_length=20000)


class CommentRead(BaseModel):
    id: str
    task_id: str
    author_id: Optional[str] = None
    text: str
    is_result: bool
    is_edited: bool
    created_at: datetime
    edited_at: Optional[datetime] = None
    author: Optional[UserBrief] = None

    model_config = {"from_attributes": True}
