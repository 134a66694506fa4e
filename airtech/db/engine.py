"""Async SQLAlchemy engine for the optional SQL storage backend."""

from __future__ import annotations

from pathlib import Path
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

_SQLITE_PREFIX = "sqlite+aiosqlite:///"


def create_engine(database_url: str) -> AsyncEngine:
    """Create an async engine, making sure a SQLite file's directory exists."""
    if database_url.startswith(_SQLITE_PREFIX):
        db_path = database_url.replace(_SQLITE_PREFIX, "")
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return create_async_engine(database_url, echo=False)


def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create the storage tables if they don't exist yet."""
    from airtech.models.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
