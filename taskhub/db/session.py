"""
db/session.py
-------------
Async SQLAlchemy engine and session factory.

Design decisions:
  - The engine is built from Settings inside the application lifespan and
    stored on app.state; nothing here is a module-level singleton.
  - PostgreSQL (asyncpg) gets a sized pool with pre-ping and hourly recycle.
    SQLite (aiosqlite, used by tests) gets NullPool.
  - expire_on_commit=False: avoids lazy-load errors after commit in async
    context (attributes are already loaded, no implicit SELECT needed).
  - One session per request; the request is the transaction boundary, so
    multi-step writes (update + history entry) commit or roll back together.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from taskhub.core.config import Settings
from taskhub.models import Base  # Imports all models so metadata is populated


def create_engine(settings: Settings) -> AsyncEngine:
    if settings.DATABASE_URL.startswith("sqlite"):
        return create_async_engine(
            settings.DATABASE_URL,
            echo=settings.DEBUG,
            poolclass=NullPool,
        )
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,          # Log SQL in development
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields a database session.
    Commits when the handler succeeds, rolls back when it raises.

    Usage:
        @router.get("/example")
        async def handler(db: AsyncSession = Depends(get_db)):
            ...
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_schema(engine: AsyncEngine, drop: bool = False) -> list[str]:
    """
    Create every table registered on Base.metadata (optionally dropping
    them first) and return the table names, in creation order.
    """
    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    return [table.name for table in Base.metadata.sorted_tables]
