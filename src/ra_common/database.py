"""Async engine and session plumbing for the finalizer.

Everything runs through raw text() SQL; the schema lives in alembic/versions.
A finalize run holds one session for its whole length and commits once per
participant, so sessions never expire loaded objects on commit.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; the services decide when to commit."""
    async with async_session_factory() as session:
        yield session


async def check_database() -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
