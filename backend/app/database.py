"""Database engine, session factory and FastAPI session dependency."""

import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for ORM models."""

    pass


class Database:
    """Owns the async engine and hands out sessions."""

    def __init__(self, url: str):
        self.url = url
        self.engine = create_async_engine(url)
        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False
        )

    async def init(self):
        """Create tables that do not exist yet."""
        # Register models on Base.metadata
        from app.models import job  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Database ready at {self.url}")

    async def dispose(self):
        """Close all pooled connections."""
        await self.engine.dispose()

    def session(self) -> AsyncSession:
        return self.session_factory()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Yield a session bound to the application's database.

    Args:
        request: Incoming request, used to reach app.state

    Yields:
        Database session
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
