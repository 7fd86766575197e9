"""Tenant resolver and access validators, exercised against a real database."""

import pytest
from sqlalchemy import select

from taskhub.core.errors import MissingIdentity, TenantNotAssigned, UserNotFound
from taskhub.models import Task
from taskhub.services.tenancy import (
    check_access,
    company_filter,
    get_user_company_info,
    require_company,
    validate_business_process_access,
    validate_task_access,
    validate_telegram_group_access,
    validate_user_access,
    validate_users_access,
)


@pytest.fixture
def tenants(seed):
    company_a = seed.company()
    company_b = seed.company()
    return {
        "a": company_a,
        "b": company_b,
        "user_a": seed.user(company_a, role="director"),
        "user_b": seed.user(company_b),
        "homeless": seed.user(None),
        "task_b": seed.task(company_b),
        "process_a": seed.process(company_a),
        "group_a": seed.group(company_a),
        "foreign_provider_group_a": seed.group(company_a, chat_id=-200, provider_type="other"),
    }


@pytest.mark.asyncio
async def test_resolver_returns_company_and_role(async_session, tenants):
    async with async_session() as db:
        info = await get_user_company_info(db, tenants["user_a"])
    assert info.company_id == tenants["a"]
    assert info.user_role == "director"
    assert require_company(info) == tenants["a"]


@pytest.mark.asyncio
async def test_resolver_missing_identity(async_session, tenants):
    async with async_session() as db:
        with pytest.raises(MissingIdentity):
            await get_user_company_info(db, None)
        with pytest.raises(MissingIdentity):
            await get_user_company_info(db, "")


@pytest.mark.asyncio
async def test_resolver_unknown_user(async_session, tenants):
    async with async_session() as db:
        with pytest.raises(UserNotFound):
            await get_user_company_info(db, "no-such-user")


@pytest.mark.asyncio
async def test_user_without_company_resolves_but_is_not_a_tenant(async_session, tenants):
    async with async_session() as db:
        info = await get_user_company_info(db, tenants["homeless"])
    assert info.company_id is None
    with pytest.raises(TenantNotAssigned):
        require_company(info)


@pytest.mark.asyncio
async def test_task_validator_checks_ownership(async_session, tenants):
    async with async_session() as db:
        assert await validate_task_access(db, tenants["task_b"], tenants["b"]) is True
        assert await validate_task_access(db, tenants["task_b"], tenants["a"]) is False
        assert await validate_task_access(db, tenants["task_b"], None) is False
        assert await validate_task_access(db, "missing", tenants["b"]) is False


@pytest.mark.asyncio
async def test_user_validator_checks_ownership(async_session, tenants):
    async with async_session() as db:
        assert await validate_user_access(db, tenants["user_a"], tenants["a"]) is True
        assert await validate_user_access(db, tenants["user_b"], tenants["a"]) is False
        assert await validate_user_access(db, tenants["homeless"], tenants["a"]) is False
        assert await validate_user_access(db, tenants["user_a"], None) is False


@pytest.mark.asyncio
async def test_process_validator_checks_ownership(async_session, tenants):
    async with async_session() as db:
        assert await validate_business_process_access(db, tenants["process_a"], tenants["a"]) is True
        assert await validate_business_process_access(db, tenants["process_a"], tenants["b"]) is False
        assert await validate_business_process_access(db, tenants["process_a"], None) is False


@pytest.mark.asyncio
async def test_group_validator_requires_provider_type(async_session, tenants):
    async with async_session() as db:
        assert await validate_telegram_group_access(db, tenants["group_a"], tenants["a"]) is True
        assert await validate_telegram_group_access(db, tenants["group_a"], tenants["b"]) is False
        assert (
            await validate_telegram_group_access(
                db, tenants["foreign_provider_group_a"], tenants["a"]
            )
            is False
        )


@pytest.mark.asyncio
async def test_bulk_user_validator(async_session, tenants, seed):
    colleague = seed.user(tenants["a"])
    async with async_session() as db:
        assert await validate_users_access(db, [], tenants["a"]) is True
        assert await validate_users_access(
            db, [tenants["user_a"], colleague, colleague], tenants["a"]
        ) is True
        assert await validate_users_access(
            db, [tenants["user_a"], tenants["user_b"]], tenants["a"]
        ) is False
        assert await validate_users_access(db, [tenants["user_a"]], None) is False


@pytest.mark.asyncio
async def test_company_filter_with_no_company_matches_nothing(async_session, tenants):
    async with async_session() as db:
        scoped = await db.execute(company_filter(select(Task.id), Task.company_id, tenants["b"]))
        unscoped = await db.execute(company_filter(select(Task.id), Task.company_id, None))
        assert scoped.scalars().all() == [tenants["task_b"]]
        assert unscoped.scalars().all() == []


def test_check_access():
    assert check_access("employee") is True
    assert check_access("director", ["director", "admin"]) is True
    assert check_access("employee", ["director", "admin"]) is False
