# ==============================================================================
# DATABASE ADAPTERS PACKAGE
# ==============================================================================

"""
Database Adapters
=================

Provides the transaction source consumed by the unit of work:
- BaseConnectionPool / BaseTransaction: Abstract contracts
- SQLAlchemyConnectionPool: AsyncEngine-backed pool (aiosqlite, asyncpg)
- SQLAlchemyTransaction: AsyncSession-backed transaction handle
"""

from uow_coordinator.database.adapters.base_adapter import (
    BaseConnectionPool,
    BaseTransaction,
)
from uow_coordinator.database.adapters.sqlalchemy_adapter import (
    SQLAlchemyConnectionPool,
    SQLAlchemyTransaction,
    build_engine_options,
)

__all__ = [
    "BaseConnectionPool",
    "BaseTransaction",
    "SQLAlchemyConnectionPool",
    "SQLAlchemyTransaction",
    "build_engine_options",
]
