"""
Registry storage: async SQLModel engine and request-scoped record stores.
"""

import logging
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

import ccred.models  # noqa: F401  registers the registry tables
from ccred.core.config import get_settings
from ccred.db.store import Records

logger = logging.getLogger(__name__)
settings = get_settings()

engine = create_async_engine(settings.database_url, echo=settings.debug)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession
)


async def init_db() -> None:
    """Create the registry tables and the upload directory if missing."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    logger.info(
        "Registry storage ready: %d tables, uploads in %s",
        len(SQLModel.metadata.tables),
        settings.upload_dir
    )


async def close_db() -> None:
    await engine.dispose()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency yielding a bare session for ad-hoc queries."""
    async with AsyncSessionLocal() as session:
        yield session


async def get_records() -> AsyncGenerator[Records, None]:
    """Dependency yielding the record stores, all bound to one request session."""
    async with AsyncSessionLocal() as session:
        yield Records(session)
