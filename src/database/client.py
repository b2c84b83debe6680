"""PostgreSQL client and connection management with SQLAlchemy."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from src.config.settings import Settings, settings

from .base import Base
from .errors import PersistenceError

logger = logging.getLogger(__name__)

# Global SQLAlchemy engine
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get the SQLAlchemy async engine instance."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the SQLAlchemy async session factory."""
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _async_session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession]:
    """Get an async database session.

    Usage:
        async with get_session() as session:
            result = await session.execute(select(User))
            users = result.scalars().all()
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def store_operation(timeout: float | None, action: str) -> AsyncGenerator[None]:
    """Bound a store call by a deadline and normalize its failures.

    Usage:
        async with store_operation(5.0, "look up user"):
            result = await session.execute(stmt)

    Args:
        timeout: Deadline in seconds, None for no deadline
        action: Short description used in logs and error messages

    Raises:
        PersistenceError: If the deadline expires or SQLAlchemy fails. The caller
            must not assume any partial effect.

    """
    try:
        async with asyncio.timeout(timeout):
            yield
    except TimeoutError as exc:
        logger.error(f"Store deadline of {timeout}s exceeded while trying to {action}")
        raise PersistenceError(f"Timed out trying to {action}") from exc
    except SQLAlchemyError as exc:
        logger.error(f"Store failure while trying to {action}: {exc.__class__.__name__}")
        raise PersistenceError(f"Failed to {action}") from exc


def create_engine_from_settings(config: Settings) -> AsyncEngine:
    """Build the pooled async engine described by the settings."""
    return create_async_engine(
        config.database_dsn,
        echo=config.db_echo,
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_timeout=config.db_pool_timeout,
        pool_recycle=config.db_pool_recycle,
        isolation_level=config.db_isolation_level,
        pool_pre_ping=True,  # Verify connections before using
    )


async def init_db(config: Settings = settings) -> None:
    """Initialize PostgreSQL connection and SQLAlchemy.

    This function:
    1. Creates the async engine
    2. Creates the session factory
    3. Verifies connection
    """
    global _engine, _async_session_factory

    try:
        logger.info(f"Connecting to PostgreSQL at {config.db_host}:{config.db_port}/{config.db_name}")

        _engine = create_engine_from_settings(config)
        _async_session_factory = async_sessionmaker(
            _engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        async with _engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

        logger.info("Database initialization complete")

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


async def create_tables() -> None:
    """Create any missing tables for the registered models."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")


async def close_db() -> None:
    """Close PostgreSQL connection gracefully."""
    global _engine, _async_session_factory

    if _engine is not None:
        logger.info("Closing PostgreSQL connection")
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        logger.info("PostgreSQL connection closed")
