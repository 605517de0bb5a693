"""
Database Configuration

Async SQLAlchemy 2.0 setup over a local SQLite file.
Uses aiosqlite as the driver for non-blocking I/O.
"""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mindpad.core.config import settings
from mindpad.models.base import Base

logger = logging.getLogger(__name__)


def build_engine(url: str | None = None) -> AsyncEngine:
    """Create an async engine for the configured (or given) SQLite URL."""
    return create_async_engine(url or settings.DATABASE_URL, echo=False)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to ``engine``."""
    # expire_on_commit=False: prevents implicit I/O after commit when accessing attributes
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """
    Create the notes schema if it does not exist yet.

    The store is a single local file owned by one process, so tables are
    created at startup instead of through a migration step.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready (%s)", engine.url)


# Re-export Base for metadata access
__all__ = ["Base", "build_engine", "build_session_factory", "init_db"]
