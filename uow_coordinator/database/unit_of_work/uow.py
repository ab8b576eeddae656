# ==============================================================================
# UNIT OF WORK - Transaction Coordination
# ==============================================================================
# Wraps one database transaction and hands out repositories bound to it
# Commits when the unit of work succeeds, rolls back when it raises
# ==============================================================================

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

from uow_coordinator.core.exceptions import (
    CombinedRollbackError,
    NoActiveTransactionError,
    RepositoryNotRegisteredError,
    TransactionAlreadyStartedError,
)
from uow_coordinator.database.adapters.base_adapter import (
    BaseConnectionPool,
    BaseTransaction,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Builds a repository bound to the given transaction
RepositoryFactory = Callable[[BaseTransaction], Any]


class AbstractUnitOfWork(ABC):
    """
    Abstract Unit of Work pattern interface.

    Defines the contract for managing transactional boundaries
    and coordinating repository access.
    """

    @abstractmethod
    def register(self, name: str, factory: RepositoryFactory) -> None:
        """Register a repository factory under a name."""
        pass

    @abstractmethod
    def unregister(self, name: str) -> None:
        """Remove a repository factory."""
        pass

    @abstractmethod
    def get_repository(self, name: str) -> Any:
        """Build the named repository for the active transaction."""
        pass

    @abstractmethod
    async def do(self, fn: Callable[["AbstractUnitOfWork"], Awaitable[T]]) -> T:
        """Run fn inside a new transaction."""
        pass

    @abstractmethod
    async def commit_or_rollback(self) -> None:
        """Commit the transaction, rolling back if the commit fails."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback the transaction."""
        pass


class UnitOfWork(AbstractUnitOfWork):
    """
    Concrete Unit of Work implementation.

    Coordinates one database transaction at a time and builds
    repositories bound to it, so that every repository used inside a
    unit of work commits or rolls back together.

    A UnitOfWork is short-lived and not safe for concurrent use: build a
    fresh one from the shared pool for each request or operation.

    Attributes:
        _pool: Shared connection pool (not owned)
        _transaction: Active transaction handle, None when idle
        _factories: Repository factories keyed by name

    Example:
        >>> uow = UnitOfWork(pool)
        >>> uow.register("users", UserRepository)
        >>> async def create_user(uow):
        ...     users = uow.get_repository("users")
        ...     return await users.create({"email": "test@example.com"})
        >>> user = await uow.do(create_user)
    """

    def __init__(self, pool: BaseConnectionPool) -> None:
        """
        Initialize Unit of Work.

        Args:
            pool: Shared connection pool transactions are taken from
        """
        self._pool = pool
        self._transaction: Optional[BaseTransaction] = None
        self._factories: Dict[str, RepositoryFactory] = {}

    @property
    def pool(self) -> BaseConnectionPool:
        """Shared connection pool."""
        return self._pool

    @property
    def transaction(self) -> Optional[BaseTransaction]:
        """Active transaction handle, or None when idle."""
        return self._transaction

    @property
    def is_active(self) -> bool:
        """Check if a transaction is open."""
        return self._transaction is not None

    # ==========================================================================
    # REPOSITORY MANAGEMENT
    # ==========================================================================

    def register(self, name: str, factory: RepositoryFactory) -> None:
        """
        Register a repository factory.

        A later registration under the same name replaces the earlier one.

        Args:
            name: Repository identifier for later retrieval
            factory: Callable building a repository from a transaction
        """
        self._factories[name] = factory

    def unregister(self, name: str) -> None:
        """Remove a repository factory. Unknown names are ignored."""
        self._factories.pop(name, None)

    def has_repository(self, name: str) -> bool:
        """Check if a factory is registered under name."""
        return name in self._factories

    @property
    def registered_names(self) -> Tuple[str, ...]:
        """Names of all registered factories, sorted."""
        return tuple(sorted(self._factories))

    def get_repository(self, name: str) -> Any:
        """
        Build a repository bound to the active transaction.

        Each call invokes the factory again and returns a new instance.

        Args:
            name: Repository identifier

        Returns:
            Repository instance

        Raises:
            RepositoryNotRegisteredError: If no factory is registered under name
            NoActiveTransactionError: If no transaction is open
        """
        factory = self._factories.get(name)
        if factory is None:
            raise RepositoryNotRegisteredError(name, self.registered_names)
        if self._transaction is None:
            raise NoActiveTransactionError()
        return factory(self._transaction)

    # ==========================================================================
    # TRANSACTION LIFECYCLE
    # ==========================================================================

    async def begin(self) -> BaseTransaction:
        """
        Start a transaction.

        Returns:
            The new transaction handle

        Raises:
            TransactionAlreadyStartedError: If a transaction is already open
            ConnectionError: If the pool cannot start a transaction
        """
        if self._transaction is not None:
            raise TransactionAlreadyStartedError()
        self._transaction = await self._pool.begin_transaction()
        logger.debug("Transaction started")
        return self._transaction

    async def do(self, fn: Callable[["UnitOfWork"], Awaitable[T]]) -> T:
        """
        Run fn inside a new transaction.

        fn receives this unit of work and may call get_repository for any
        registered name. If fn returns, the transaction is committed and
        fn's result returned. If fn raises, the transaction is rolled back
        and the exception re-raised unchanged.

        Args:
            fn: Async callable performing the unit of work

        Returns:
            Whatever fn returned

        Raises:
            TransactionAlreadyStartedError: If a transaction is already open;
                the open transaction is not touched
            CombinedRollbackError: If a cleanup rollback fails
        """
        await self.begin()
        try:
            result = await fn(self)
        except BaseException as e:
            await self._rollback_after(e)
            raise
        await self.commit_or_rollback()
        return result

    async def commit_or_rollback(self) -> None:
        """
        Commit the transaction, rolling back if the commit fails.

        Raises:
            NoActiveTransactionError: If no transaction is open
            CommitError: If the commit failed and the rollback succeeded
            CombinedRollbackError: If both the commit and the rollback failed
        """
        if self._transaction is None:
            raise NoActiveTransactionError()
        try:
            await self._transaction.commit()
        except BaseException as e:
            await self._rollback_after(e)
            raise
        self._transaction = None
        logger.debug("Transaction committed")

    async def rollback(self) -> None:
        """
        Roll back the transaction.

        On failure the handle is kept: the transaction state is unknown
        and a retry cannot be assumed to succeed.

        Raises:
            NoActiveTransactionError: If no transaction is open
            RollbackError: If the store fails to roll back
        """
        if self._transaction is None:
            raise NoActiveTransactionError()
        await self._transaction.rollback()
        self._transaction = None
        logger.debug("Transaction rolled back")

    async def _rollback_after(self, error: BaseException) -> None:
        """
        Roll back as cleanup for error, combining both on failure.

        Cancellation and interpreter exits are never masked: when error
        is not an Exception the rollback failure is only logged and the
        caller re-raises error.
        """
        try:
            await self.rollback()
        except Exception as rollback_error:
            logger.warning(
                f"Rollback failed after {type(error).__name__}: {rollback_error}"
            )
            if not isinstance(error, Exception):
                return
            raise CombinedRollbackError(error, rollback_error) from rollback_error

    # ==========================================================================
    # CONTEXT MANAGEMENT
    # ==========================================================================

    async def __aenter__(self) -> "UnitOfWork":
        """
        Enter transactional context.

        Returns:
            Self with an open transaction
        """
        await self.begin()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Any,
    ) -> None:
        """
        Exit transactional context.

        Commits on clean exit, rolls back on exception. The body's
        exception is never suppressed.
        """
        if exc_val is not None:
            await self._rollback_after(exc_val)
            return None
        await self.commit_or_rollback()


@asynccontextmanager
async def get_unit_of_work(
    pool: Optional[BaseConnectionPool] = None,
    repositories: Optional[Mapping[str, RepositoryFactory]] = None,
) -> AsyncIterator[UnitOfWork]:
    """
    Open a fresh Unit of Work with an active transaction.

    Args:
        pool: Connection pool (defaults to the factory pool)
        repositories: Factories to register before the transaction starts

    Yields:
        UnitOfWork inside its transaction

    Example:
        >>> async with get_unit_of_work(repositories={"users": UserRepository}) as uow:
        ...     await uow.get_repository("users").create({"email": "a@b.c"})
    """
    if pool is None:
        from uow_coordinator.database.factory import DatabaseFactory
        pool = DatabaseFactory.get_pool()

    uow = UnitOfWork(pool)
    for name, factory in (repositories or {}).items():
        uow.register(name, factory)

    async with uow:
        yield uow
