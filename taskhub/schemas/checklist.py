"""
schemas/checklist.py
--------------------
Pydantic models for checklist items and their restructuring actions.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from taskhub.models.checklist import MAX_CHECKLIST_LEVEL


class ChecklistAction(str, Enum):
    indent = "indent"
    outdent = "outdent"
    move = "move"


class MoveDirection(str, Enum):
    up = "up"
    down = "down"


class ChecklistItemCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)
    level: int = Field(default=0, ge=0, le=MAX_CHECKLIST_LEVEL)
    parent_id: Optional[str] = None


class ChecklistItemUpdate(BaseModel):
    text: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    completed: Optional[bool] = None


class ChecklistRestructure(BaseModel):
    action: ChecklistAction
    direction: Optional[MoveDirection] = None

    @model_validator(mode="after")
    def direction_required_for_move(self):
        if self.action == ChecklistAction.move and self.direction is None:
            raise ValueError("direction is required for the move action")
        return self


class ChecklistItemRead(BaseModel):
    id: str
    task_id: str
    text: str
    completed: bool
    created_by: Optional[str] = None
    completed_by: Optional[str] = None
    completed_at: Optional[datetime] = None
    parent_id: Optional[str] = None
    level: int
    item_order: int
    created_at: datetime

    model_config = {"from_attributes": True}
