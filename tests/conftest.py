"""
Shared fixtures.

Every test gets its own SQLite file: tables are created and rows seeded
through a synchronous engine, while the application (or a service under
test) talks to the same file through aiosqlite.
"""

import hashlib
import hmac
import json
import os
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import urlencode

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:TEST-BOT-TOKEN")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./taskhub-test.db")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from main import create_application  # noqa: E402
from taskhub.core.config import Settings  # noqa: E402
from taskhub.core.security import create_session_token  # noqa: E402
from taskhub.models import (  # noqa: E402
    Base,
    BusinessProcess,
    Company,
    Notification,
    Task,
    TelegramChatBinding,
    User,
)

BOT_TOKEN = "123456:TEST-BOT-TOKEN"
SECRET_KEY = "test-secret-key"


def sign_init_data(fields: dict, bot_token: str = BOT_TOKEN) -> str:
    """Build a Telegram init-data query string signed the way Telegram signs it."""
    check_string = "\n".join(f"{k}={v}" for k, v in sorted(fields.items()))
    secret = hmac.new(b"WebAppData", bot_token.encode(), hashlib.sha256).digest()
    digest = hmac.new(secret, check_string.encode(), hashlib.sha256).hexdigest()
    return urlencode({**fields, "hash": digest})


def telegram_fields(telegram_id: int, auth_date: int = 1700000000, **extra) -> dict:
    user = {"id": telegram_id, "first_name": "Test", "username": f"tg{telegram_id}"}
    return {
        "query_id": "AAHdF6IQAAAAAN0XohDhrOrc",
        "user": json.dumps(user, separators=(",", ":")),
        "auth_date": str(auth_date),
        **extra,
    }


class Seeder:
    """Inserts rows through a synchronous session and returns their ids."""

    def __init__(self, engine):
        self.engine = engine
        self._telegram_ids = iter(range(1000, 100000))

    def _add(self, obj) -> str:
        with Session(self.engine) as session:
            session.add(obj)
            session.commit()
            return obj.id

    def company(self, **kwargs) -> str:
        return self._add(Company(**kwargs))

    def user(
        self,
        company_id: Optional[str],
        role: str = "employee",
        name: str = "User",
        is_active: bool = True,
        telegram_user_id: Optional[int] = None,
    ) -> str:
        return self._add(User(
            name=name,
            role=role,
            company_id=company_id,
            is_active=is_active,
            telegram_user_id=telegram_user_id or next(self._telegram_ids),
        ))

    def task(self, company_id: str, creator_id: Optional[str] = None, **kwargs) -> str:
        kwargs.setdefault("title", "Task")
        return self._add(Task(company_id=company_id, creator_id=creator_id, **kwargs))

    def process(self, company_id: str, name: str = "Process", **kwargs) -> str:
        return self._add(BusinessProcess(company_id=company_id, name=name, **kwargs))

    def group(self, company_id: str, chat_id: int = -100123, **kwargs) -> str:
        return self._add(TelegramChatBinding(company_id=company_id, chat_id=chat_id, **kwargs))

    def notification(self, company_id: str, recipient_user_id: str, **kwargs) -> str:
        kwargs.setdefault("message_text", "Ping")
        return self._add(Notification(
            company_id=company_id, recipient_user_id=recipient_user_id, **kwargs
        ))

    def get(self, model, entity_id: str):
        with Session(self.engine, expire_on_commit=False) as session:
            obj = session.get(model, entity_id)
            if obj is not None:
                session.expunge(obj)
            return obj


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "taskhub.db"


@pytest.fixture
def sync_engine(db_path):
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seed(sync_engine) -> Seeder:
    return Seeder(sync_engine)


@pytest.fixture
def settings(db_path) -> Settings:
    return Settings(
        SECRET_KEY=SECRET_KEY,
        TELEGRAM_BOT_TOKEN=BOT_TOKEN,
        DATABASE_URL=f"sqlite+aiosqlite:///{db_path}",
        ALLOWED_ORIGINS=["http://localhost:3000"],
    )


@pytest.fixture
def app(settings, sync_engine):
    return create_application(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(settings):
    """auth_headers(user_id) -> headers carrying a valid session for that user."""

    def _headers(user_id: str, telegram_user_id: int = 1) -> dict:
        token = create_session_token(user_id, telegram_user_id, settings)
        return {"Authorization": f"Bearer {token}", "X-User-Id": user_id}

    return _headers


@pytest.fixture
def async_session(settings, sync_engine):
    """
    async_session() -> async context manager yielding an AsyncSession bound
    to the test database. The engine is disposed on exit.
    """

    @asynccontextmanager
    async def _session():
        engine = create_async_engine(settings.DATABASE_URL, poolclass=NullPool)
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        try:
            async with factory() as session:
                yield session
        finally:
            await engine.dispose()

    return _session
