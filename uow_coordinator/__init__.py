# ==============================================================================
# PACKAGE INITIALIZATION
# ==============================================================================
# Unit of Work coordinator over async SQLAlchemy
# ==============================================================================

"""
Unit of Work Coordinator
========================

Wraps one relational transaction and hands out repositories bound to it,
so that all repository work inside one business operation commits or
rolls back atomically.

Usage:
------
    from uow_coordinator import UnitOfWork, DatabaseFactory

    pool = await DatabaseFactory.initialize()

    uow = UnitOfWork(pool)
    uow.register("users", UserRepository)

    async def create_user(uow):
        users = uow.get_repository("users")
        return await users.create({"email": "test@example.com"})

    user = await uow.do(create_user)
"""

from uow_coordinator.core.exceptions import (
    CombinedRollbackError,
    CommitError,
    ConnectionError,
    NoActiveTransactionError,
    RepositoryNotRegisteredError,
    RollbackError,
    TransactionAlreadyStartedError,
)
from uow_coordinator.database.adapters import (
    BaseConnectionPool,
    BaseTransaction,
    SQLAlchemyConnectionPool,
    SQLAlchemyTransaction,
)
from uow_coordinator.database.factory import DatabaseFactory
from uow_coordinator.database.repositories import BaseRepository
from uow_coordinator.database.unit_of_work import (
    AbstractUnitOfWork,
    RepositoryFactory,
    UnitOfWork,
    get_unit_of_work,
)

__version__ = "1.0.0"
__all__ = [
    "__version__",
    "AbstractUnitOfWork",
    "BaseConnectionPool",
    "BaseRepository",
    "BaseTransaction",
    "CombinedRollbackError",
    "CommitError",
    "ConnectionError",
    "DatabaseFactory",
    "NoActiveTransactionError",
    "RepositoryFactory",
    "RepositoryNotRegisteredError",
    "RollbackError",
    "SQLAlchemyConnectionPool",
    "SQLAlchemyTransaction",
    "TransactionAlreadyStartedError",
    "UnitOfWork",
    "get_unit_of_work",
]
