# ==============================================================================
# SQLALCHEMY ADAPTER - AsyncEngine-backed Pool and Session Transactions
# ==============================================================================
# Works with any async SQLAlchemy driver (aiosqlite, asyncpg)
# Driver failures are re-raised as typed coordinator errors
# ==============================================================================

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from uow_coordinator.core.exceptions import (
    CommitError,
    ConnectionError,
    RollbackError,
)
from uow_coordinator.database.adapters.base_adapter import (
    BaseConnectionPool,
    BaseTransaction,
)

logger = logging.getLogger(__name__)

# Errors the driver may raise instead of a wrapped SQLAlchemyError
DRIVER_ERRORS = (SQLAlchemyError, OSError)


class SQLAlchemyTransaction(BaseTransaction):
    """
    Transaction handle around a single AsyncSession.

    Repositories bound to this handle share ``session`` and therefore
    the same connection and transaction. The session is closed once the
    transaction ends successfully.

    Attributes:
        _session: Session holding the open transaction
        _closed: Set after a successful commit or rollback
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._closed = False

    @property
    def session(self) -> AsyncSession:
        """Session shared by every repository in this transaction."""
        return self._session

    @property
    def is_active(self) -> bool:
        """True until the transaction has been committed or rolled back."""
        return not self._closed and self._session.in_transaction()

    async def commit(self) -> None:
        """
        Commit and close the session.

        Raises:
            CommitError: If the driver rejects the commit. The session
                stays open so the caller can roll back.
        """
        try:
            await self._session.commit()
        except DRIVER_ERRORS as e:
            raise CommitError(
                f"Commit failed: {e}",
                details={"driver_error": type(e).__name__},
            ) from e
        await self._finish()

    async def rollback(self) -> None:
        """
        Roll back and close the session.

        Raises:
            RollbackError: If the driver fails to roll back. The session
                is left as is.
        """
        try:
            await self._session.rollback()
        except DRIVER_ERRORS as e:
            raise RollbackError(
                f"Rollback failed: {e}",
                details={"driver_error": type(e).__name__},
            ) from e
        await self._finish()

    async def _finish(self) -> None:
        self._closed = True
        await self._session.close()


class SQLAlchemyConnectionPool(BaseConnectionPool):
    """
    Connection pool backed by an SQLAlchemy AsyncEngine.

    The engine owns the actual connection pooling; this class only hands
    out one session-backed transaction per begin_transaction() call.

    Attributes:
        _engine: SQLAlchemy async engine
        _session_factory: Session factory for creating sessions

    Example:
        >>> pool = SQLAlchemyConnectionPool.from_url("sqlite+aiosqlite:///./app.db")
        >>> uow = UnitOfWork(pool)
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_url(cls, url: str, **engine_options: Any) -> "SQLAlchemyConnectionPool":
        """
        Build a pool from a connection URL.

        Args:
            url: Async SQLAlchemy URL (e.g. sqlite+aiosqlite:///./app.db)
            **engine_options: Passed through to create_async_engine

        Returns:
            Pool owning a new engine
        """
        engine = create_async_engine(url, **engine_options)
        logger.info(f"Created connection pool for {engine.url.render_as_string(hide_password=True)}")
        return cls(engine)

    @property
    def engine(self) -> AsyncEngine:
        """Underlying async engine."""
        return self._engine

    async def begin_transaction(self) -> SQLAlchemyTransaction:
        """
        Open a session and start its transaction.

        The connection is acquired eagerly so that connection failures
        surface here rather than on the first repository call.

        Returns:
            Open SQLAlchemyTransaction

        Raises:
            ConnectionError: If a connection cannot be acquired
        """
        session = self._session_factory()
        try:
            await session.connection()
        except DRIVER_ERRORS as e:
            await session.close()
            raise ConnectionError(
                f"Failed to begin transaction: {e}",
                details={"driver_error": type(e).__name__},
            ) from e
        except BaseException:
            # Cancelled while acquiring; release whatever was checked out
            await session.close()
            raise
        return SQLAlchemyTransaction(session)

    async def health_check(self) -> bool:
        """
        Verify database connectivity.

        Returns:
            True if a SELECT 1 round-trip succeeds
        """
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except DRIVER_ERRORS as e:
            logger.warning(f"Health check failed: {e}")
            return False

    async def dispose(self) -> None:
        """Close pooled connections and dispose the engine."""
        await self._engine.dispose()
        logger.info("Connection pool disposed")


def build_engine_options(
    url: str,
    *,
    echo: bool = False,
    pool_size: Optional[int] = None,
    max_overflow: Optional[int] = None,
    pool_timeout: Optional[int] = None,
    pool_recycle: Optional[int] = None,
    pool_pre_ping: bool = True,
) -> dict[str, Any]:
    """
    Engine keyword arguments suitable for the URL's backend.

    SQLite gets ``check_same_thread=False`` and no queue sizing, since its
    default pools reject those arguments. Server databases get the pool
    sizing that was supplied.
    """
    options: dict[str, Any] = {"echo": echo}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        return options

    options["pool_pre_ping"] = pool_pre_ping
    for key, value in (
        ("pool_size", pool_size),
        ("max_overflow", max_overflow),
        ("pool_timeout", pool_timeout),
        ("pool_recycle", pool_recycle),
    ):
        if value is not None:
            options[key] = value
    return options
