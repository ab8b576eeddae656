# ==============================================================================
# BASE ADAPTER - Connection Pool & Transaction Contracts
# ==============================================================================
# Defines what the unit of work consumes from the relational store
# ==============================================================================

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseTransaction(ABC):
    """
    Abstract handle for one open database transaction.

    A handle is produced by BaseConnectionPool.begin_transaction() and
    ends with exactly one successful commit() or rollback(). Repositories
    built from it are only valid while it is open.
    """

    @abstractmethod
    async def commit(self) -> None:
        """
        Commit the transaction.

        Raises:
            CommitError: If the store refuses the commit
        """
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """
        Roll back the transaction.

        Raises:
            RollbackError: If the store fails to roll back
        """
        pass


class BaseConnectionPool(ABC):
    """
    Abstract source of transactions.

    The pool is shared across many units of work and its lifetime is
    managed by the application, never by a unit of work.

    Example:
        >>> pool = SQLAlchemyConnectionPool.from_url("sqlite+aiosqlite:///./app.db")
        >>> tx = await pool.begin_transaction()
        >>> await tx.commit()
    """

    @abstractmethod
    async def begin_transaction(self) -> BaseTransaction:
        """
        Start a new transaction.

        Cancelling the awaiting task aborts connection acquisition.

        Returns:
            Open transaction handle

        Raises:
            ConnectionError: If no transaction can be started
        """
        pass

    async def health_check(self) -> bool:
        """Verify connectivity. Pools without a check report healthy."""
        return True

    async def dispose(self) -> None:
        """Release pooled connections."""
        return None
