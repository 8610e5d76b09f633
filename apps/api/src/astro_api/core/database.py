"""
Database Configuration

Async SQLAlchemy engine and session factory for the Document Store.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from astro_api.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


engine = create_async_engine(settings.database_url, pool_pre_ping=True)

# expire_on_commit=False keeps server-assigned columns readable after commit
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a database session.

    The session is rolled back if the request handler raises.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """
    Verify connectivity and create missing tables.

    Alembic owns the schema in production; create_all only fills the gaps
    for local SQLite databases.
    """
    # Import models so Base.metadata is populated
    from astro_api.modules.applications import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        if not settings.is_production:
            await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the connection pool."""
    await engine.dispose()
