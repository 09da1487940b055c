"""Async engine, session factory and the request-scoped session dependency.

Services own commit / rollback. A session closed mid-transaction (an
exception escaped before the service could roll back) is rolled back by
AsyncSession.close(), so nothing half-written is ever committed implicitly.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Declarative base for ORM-mapped tables (members only; the rest is raw SQL)."""


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one AsyncSession per request, closed afterwards."""
    async with async_session_factory() as session:
        yield session


async def ping_database() -> None:
    """Raise if PostgreSQL is unreachable; used at startup."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
