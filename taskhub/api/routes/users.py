"""
api/routes/users.py
-------------------
User endpoints, scoped to the caller's company.

GET  /api/users        - List colleagues (optionally only active ones).
POST /api/users        - Director: add a user to the company.
GET  /api/users/{id}   - Get one colleague.
PUT  /api/users/{id}   - Director edits anyone; others edit their own profile.
"""

from typing import Optional

from fastapi import APIRouter, status

from taskhub.dependencies import DbSession, TenantCaller
from taskhub.schemas.user import UserCreate, UserRead, UserUpdate
from taskhub.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=list[UserRead], summary="List company users")
async def list_users(
    db: DbSession, caller: TenantCaller, active: Optional[bool] = None
) -> list[UserRead]:
    users = await UserService.list_users(db, caller.company_id, active=active)
    return [UserRead.model_validate(u) for u in users]


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Director: create a user in the current company",
)
async def create_user(body: UserCreate, db: DbSession, caller: TenantCaller) -> UserRead:
    user = await UserService.create_user(db, caller, body)
    return UserRead.model_validate(user)


@router.get("/{user_id}", response_model=UserRead, summary="Get a company user")
async def get_user(user_id: str, db: DbSession, caller: TenantCaller) -> UserRead:
    user = await UserService.get_user(db, user_id, caller.company_id)
    return UserRead.model_validate(user)


@router.put("/{user_id}", response_model=UserRead, summary="Update a company user")
async def update_user(
    user_id: str, body: UserUpdate, db: DbSession, caller: TenantCaller
) -> UserRead:
    user = await UserService.update_user(db, caller, user_id, body)
    return UserRead.model_validate(user)
