# ==============================================================================
# DATABASE PACKAGE INITIALIZATION
# ==============================================================================
# Transaction coordination over a shared relational connection pool
# ==============================================================================

"""
Database Module
===============

Key Components:
- Adapters: Connection pool and transaction handle implementations
- Factory: Shared pool lifecycle
- Repositories: Transaction-scoped data access
- Unit of Work: Transaction coordination
"""

from uow_coordinator.database.factory import DatabaseFactory
from uow_coordinator.database.adapters.base_adapter import (
    BaseConnectionPool,
    BaseTransaction,
)
from uow_coordinator.database.unit_of_work import UnitOfWork, get_unit_of_work

__all__ = [
    "DatabaseFactory",
    "BaseConnectionPool",
    "BaseTransaction",
    "UnitOfWork",
    "get_unit_of_work",
]
