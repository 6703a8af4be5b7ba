"""Engine and session lifecycle for the TeamSpace database."""

import logging
import os
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from teamspace.db.models import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_sessions: async_sessionmaker[AsyncSession] | None = None


def get_database_url() -> str:
    """Resolve TEAMSPACE_DB to an async SQLAlchemy URL.

    A bare value is a SQLite file path. ``postgres://`` and ``postgresql://``
    URLs are switched to the asyncpg driver.
    """
    value = os.environ.get("TEAMSPACE_DB", "teamspace.db")
    if "://" not in value:
        return f"sqlite+aiosqlite:///{value}"

    for prefix in ("postgresql://", "postgres://"):
        if value.startswith(prefix):
            return "postgresql+asyncpg://" + value[len(prefix) :]
    return value


def _engine_options(db_url: str) -> dict[str, Any]:
    if db_url.startswith("sqlite"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {
        "pool_size": int(os.environ.get("TEAMSPACE_DB_POOL_SIZE", "5")),
        "max_overflow": int(os.environ.get("TEAMSPACE_DB_MAX_OVERFLOW", "10")),
        "pool_pre_ping": True,
    }


async def init_db(db_url: str | None = None, reset: bool = False) -> None:
    """Open the engine and create the team tables.

    With ``reset=True`` existing tables are dropped first.
    """
    global _engine, _sessions

    db_url = db_url or get_database_url()
    logger.info("Connecting to database: %s", db_url.rpartition("@")[2])

    if _engine is not None:
        await close_db()

    _engine = create_async_engine(db_url, echo=False, **_engine_options(db_url))
    _sessions = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)

    async with _engine.begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
            logger.warning("Dropped all TeamSpace tables")
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _sessions

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessions = None


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """One unit of work: commit when the block succeeds, roll back when it raises."""
    if _sessions is None:
        await init_db()

    async with _sessions() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency wrapping each request in ``session_scope``."""
    async with session_scope() as session:
        yield session


def get_engine() -> AsyncEngine | None:
    return _engine
