"""
services/checklist_service.py
-----------------------------
Business logic for task checklists.

Items form a flat, ordered outline: `item_order` positions an item within
its task and `level` (0..MAX_CHECKLIST_LEVEL) is its indent depth. Indent
and outdent clamp at the bounds; moving past either end is a no-op.
"""

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.errors import EntityNotFound, InvalidReference
from taskhub.core.logging import get_logger
from taskhub.models.checklist import MAX_CHECKLIST_LEVEL, ChecklistItem
from taskhub.models.task import HistoryAction, HistoryEntry
from taskhub.schemas.checklist import (
    ChecklistAction,
    ChecklistItemCreate,
    ChecklistItemUpdate,
    ChecklistRestructure,
    MoveDirection,
)
from taskhub.services.task_service import load_live_task, load_task
from taskhub.services.tenancy import UserCompanyInfo

logger = get_logger(__name__)


async def _load_item(
    db: AsyncSession, task_id: str, item_id: str, company_id: str
) -> ChecklistItem:
    result = await db.execute(
        select(ChecklistItem).where(
            ChecklistItem.id == item_id,
            ChecklistItem.task_id == task_id,
            ChecklistItem.company_id == company_id,
        )
    )
    item = result.scalar_one_or_none()
    if item is None:
        raise EntityNotFound("Checklist item not found")
    return item


async def _ordered_items(db: AsyncSession, task_id: str, company_id: str) -> list[ChecklistItem]:
    result = await db.execute(
        select(ChecklistItem)
        .where(ChecklistItem.task_id == task_id, ChecklistItem.company_id == company_id)
        .order_by(ChecklistItem.item_order, ChecklistItem.created_at)
    )
    return list(result.scalars().all())


class ChecklistService:

    @staticmethod
    async def list_items(db: AsyncSession, task_id: str, company_id: str) -> list[ChecklistItem]:
        task = await load_task(db, task_id, company_id)
        return await _ordered_items(db, task.id, company_id)

    @staticmethod
    async def add_item(
        db: AsyncSession, caller: UserCompanyInfo, task_id: str, data: ChecklistItemCreate
    ) -> ChecklistItem:
        """Append an item at the end of the task's checklist."""
        task = await load_live_task(db, task_id, caller.company_id)
        if data.parent_id:
            parent = await db.execute(
                select(ChecklistItem.id).where(
                    ChecklistItem.id == data.parent_id,
                    ChecklistItem.task_id == task.id,
                    ChecklistItem.company_id == caller.company_id,
                )
            )
            if parent.first() is None:
                raise InvalidReference("Parent checklist item not found")

        max_order = await db.execute(
            select(func.max(ChecklistItem.item_order)).where(
                ChecklistItem.task_id == task.id,
                ChecklistItem.company_id == caller.company_id,
            )
        )
        current_max = max_order.scalar_one_or_none()

        item = ChecklistItem(
            task_id=task.id,
            company_id=caller.company_id,
            text=data.text,
            created_by=caller.user_id,
            parent_id=data.parent_id,
            level=data.level,
            item_order=0 if current_max is None else current_max + 1,
        )
        db.add(item)
        db.add(HistoryEntry(
            task_id=task.id,
            action_type=HistoryAction.checklist_updated.value,
            user_id=caller.user_id,
            description="Checklist item added",
            new_value={"text": data.text},
        ))
        await db.flush()
        await db.refresh(item)
        return item

    @staticmethod
    async def update_item(
        db: AsyncSession,
        caller: UserCompanyInfo,
        task_id: str,
        item_id: str,
        data: ChecklistItemUpdate,
    ) -> ChecklistItem:
        task = await load_live_task(db, task_id, caller.company_id)
        item = await _load_item(db, task.id, item_id, caller.company_id)

        if data.text is not None:
            item.text = data.text
        if data.completed is not None:
            item.completed = data.completed
            if data.completed:
                item.completed_by = caller.user_id
                item.completed_at = datetime.now(timezone.utc)
            else:
                item.completed_by = None
                item.completed_at = None

        await db.flush()
        await db.refresh(item)
        return item

    @staticmethod
    async def restructure(
        db: AsyncSession,
        caller: UserCompanyInfo,
        task_id: str,
        item_id: str,
        data: ChecklistRestructure,
    ) -> ChecklistItem:
        task = await load_live_task(db, task_id, caller.company_id)
        item = await _load_item(db, task.id, item_id, caller.company_id)

        if data.action == ChecklistAction.indent:
            item.level = min(item.level + 1, MAX_CHECKLIST_LEVEL)
        elif data.action == ChecklistAction.outdent:
            item.level = max(item.level - 1, 0)
        else:
            items = await _ordered_items(db, task.id, caller.company_id)
            index = next(i for i, other in enumerate(items) if other.id == item.id)
            target = index - 1 if data.direction == MoveDirection.up else index + 1
            if 0 <= target < len(items):
                neighbour = items[target]
                if neighbour.item_order == item.item_order:
                    # Equal orders would make the swap a no-op; renumber first
                    for position, other in enumerate(items):
                        other.item_order = position
                item.item_order, neighbour.item_order = neighbour.item_order, item.item_order

        await db.flush()
        await db.refresh(item)
        return item

    @staticmethod
    async def delete_item(
        db: AsyncSession, caller: UserCompanyInfo, task_id: str, item_id: str
    ) -> None:
        task = await load_live_task(db, task_id, caller.company_id)
        item = await _load_item(db, task.id, item_id, caller.company_id)
        await db.delete(item)
        db.add(HistoryEntry(
            task_id=task.id,
            action_type=HistoryAction.checklist_updated.value,
            user_id=caller.user_id,
            description="Checklist item deleted",
            old_value={"text": item.text},
        ))
        await db.flush()
