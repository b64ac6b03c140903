"""Async engine, session factory and the unit-of-work helper.

Every logical ledger operation (e.g. insert transaction + move balance + bump pool)
runs inside one PostgreSQL transaction via `unit_of_work`. A failed guard anywhere
in the batch rolls back every earlier statement, so no partial state is left behind.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit on clean exit; roll back and re-raise on any exception.

    A rollback that itself fails is logged and the original error still propagates.
    The connection is then discarded by the pool, which aborts the server-side transaction.
    """
    try:
        yield db
        await db.commit()
    except BaseException:
        try:
            await db.rollback()
        except Exception:
            logger.exception("Rollback failed; connection will be invalidated")
        raise
