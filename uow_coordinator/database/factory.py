# ==============================================================================
# DATABASE FACTORY - Shared Pool Instantiation & Lifecycle Management
# ==============================================================================
# Builds the process-wide connection pool from settings
# Units of work are created per operation; the pool they draw from is shared
# ==============================================================================

from __future__ import annotations

import logging
from typing import Optional

from uow_coordinator.core.settings import settings
from uow_coordinator.core.exceptions import DatabaseError
from uow_coordinator.database.adapters.base_adapter import BaseConnectionPool
from uow_coordinator.database.adapters.sqlalchemy_adapter import (
    SQLAlchemyConnectionPool,
    build_engine_options,
)

logger = logging.getLogger(__name__)


class DatabaseFactory:
    """
    Factory class for creating and managing the shared connection pool.

    Features:
        - Pool creation from settings or an explicit URL
        - Cached pool instance shared by all units of work
        - Lifecycle management (initialize/shutdown)

    Class Attributes:
        _pool: Cached pool instance

    Example:
        >>> # Initialize at application startup
        >>> await DatabaseFactory.initialize()
        >>>
        >>> # Build a unit of work per operation
        >>> uow = UnitOfWork(DatabaseFactory.get_pool())
        >>>
        >>> # Shutdown at application exit
        >>> await DatabaseFactory.shutdown()
    """

    _pool: Optional[BaseConnectionPool] = None

    @classmethod
    def create_pool(
        cls,
        database_url: Optional[str] = None,
    ) -> BaseConnectionPool:
        """
        Create and cache the connection pool.

        Returns the cached instance if available.

        Args:
            database_url: Custom connection URL (defaults to settings)

        Returns:
            Connection pool instance
        """
        if cls._pool is not None:
            return cls._pool

        url = database_url or settings.database_url
        options = build_engine_options(
            url,
            echo=settings.DB_ECHO or settings.DEBUG,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )
        cls._pool = SQLAlchemyConnectionPool.from_url(url, **options)
        return cls._pool

    @classmethod
    async def initialize(
        cls,
        database_url: Optional[str] = None,
    ) -> BaseConnectionPool:
        """
        Create the pool and verify connectivity.

        Should be called at application startup.

        Args:
            database_url: Custom connection URL (defaults to settings)

        Returns:
            Initialized connection pool

        Raises:
            DatabaseError: If the database is unreachable
        """
        pool = cls.create_pool(database_url)

        if not await pool.health_check():
            logger.error("Database initialization failed: health check did not pass")
            await cls.shutdown()
            raise DatabaseError("Failed to initialize database: health check failed")

        logger.info("Database pool initialized")
        return pool

    @classmethod
    async def shutdown(cls) -> None:
        """
        Dispose the pool and clear the cache.

        Should be called at application shutdown.
        """
        if cls._pool is None:
            return
        try:
            await cls._pool.dispose()
        finally:
            cls._pool = None
        logger.info("All database connections closed")

    @classmethod
    def get_pool(cls) -> BaseConnectionPool:
        """
        Get the existing pool instance.

        Returns:
            Initialized pool

        Raises:
            RuntimeError: If the pool is not initialized
        """
        if cls._pool is None:
            raise RuntimeError(
                "Connection pool not initialized. "
                "Call DatabaseFactory.initialize() first."
            )
        return cls._pool

    @classmethod
    def is_initialized(cls) -> bool:
        """Check if a pool is cached."""
        return cls._pool is not None

    @classmethod
    async def health_check(cls) -> bool:
        """
        Check database health.

        Returns:
            True if the pool exists and the database answers
        """
        if cls._pool is None:
            return False
        return await cls._pool.health_check()

    @classmethod
    def reset(cls) -> None:
        """
        Reset factory state.

        Clears the cached pool without disposing it.
        Primarily for testing purposes.
        """
        cls._pool = None
