"""Database configuration and session management."""

import logging
from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from smart_checkin.config import settings

logger = logging.getLogger(__name__)

# Create declarative base for models
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how the timestamp columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _engine_options() -> dict:
    options = {"echo": settings.debug, "future": True, "pool_pre_ping": True}
    if not settings.is_sqlite:
        options.update({"pool_size": 5, "max_overflow": 10, "pool_recycle": 3600})
    return options


# Create async engine for database operations
async_engine = create_async_engine(settings.database_url, **_engine_options())

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get database session.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Initialize database tables."""
    async with async_engine.begin() as conn:
        # Import all models to ensure they are registered
        from smart_checkin.models import (  # noqa: F401
            passkey_credential,
            reservation,
            security_log,
            webauthn_challenge,
        )

        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def close_db() -> None:
    """Close database connections."""
    await async_engine.dispose()
