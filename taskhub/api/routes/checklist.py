"""
api/routes/checklist.py
-----------------------
Task checklist endpoints. Writes on a task in the trash are refused (403).

GET    /api/tasks/{id}/checklist
POST   /api/tasks/{id}/checklist
PUT    /api/tasks/{id}/checklist/{item_id}   - text / completed
PATCH  /api/tasks/{id}/checklist/{item_id}   - indent / outdent / move
DELETE /api/tasks/{id}/checklist/{item_id}
"""

from fastapi import APIRouter, status

from taskhub.dependencies import DbSession, TenantCaller
from taskhub.schemas.checklist import (
    ChecklistItemCreate,
    ChecklistItemRead,
    ChecklistItemUpdate,
    ChecklistRestructure,
)
from taskhub.services.checklist_service import ChecklistService

router = APIRouter(prefix="/api/tasks/{task_id}/checklist", tags=["Checklist"])


@router.get("", response_model=list[ChecklistItemRead], summary="List checklist items")
async def list_items(
    task_id: str, db: DbSession, caller: TenantCaller
) -> list[ChecklistItemRead]:
    items = await ChecklistService.list_items(db, task_id, caller.company_id)
    return [ChecklistItemRead.model_validate(i) for i in items]


@router.post(
    "",
    response_model=ChecklistItemRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add a checklist item",
)
async def add_item(
    task_id: str, body: ChecklistItemCreate, db: DbSession, caller: TenantCaller
) -> ChecklistItemRead:
    item = await ChecklistService.add_item(db, caller, task_id, body)
    return ChecklistItemRead.model_validate(item)


@router.put("/{item_id}", response_model=ChecklistItemRead, summary="Edit a checklist item")
async def update_item(
    task_id: str,
    item_id: str,
    body: ChecklistItemUpdate,
    db: DbSession,
    caller: TenantCaller,
) -> ChecklistItemRead:
    item = await ChecklistService.update_item(db, caller, task_id, item_id, body)
    return ChecklistItemRead.model_validate(item)


@router.patch(
    "/{item_id}",
    response_model=ChecklistItemRead,
    summary="Indent, outdent or move a checklist item",
)
async def restructure_item(
    task_id: str,
    item_id: str,
    body: ChecklistRestructure,
    db: DbSession,
    caller: TenantCaller,
) -> ChecklistItemRead:
    item = await ChecklistService.restructure(db, caller, task_id, item_id, body)
    return ChecklistItemRead.model_validate(item)


@router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a checklist item",
)
async def delete_item(
    task_id: str, item_id: str, db: DbSession, caller: TenantCaller
) -> None:
    await ChecklistService.delete_item(db, caller, task_id, item_id)
