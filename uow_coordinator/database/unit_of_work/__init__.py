# ==============================================================================
# UNIT OF WORK PACKAGE INITIALIZATION
# ==============================================================================

"""
Unit of Work Pattern Implementation
===================================

Provides transactional consistency across repository operations:
- UnitOfWork: Coordinates one transaction and its repositories
- RepositoryFactory: Callable building a repository from a transaction
- get_unit_of_work: Context manager opening a fresh unit of work
"""

from uow_coordinator.database.unit_of_work.uow import (
    AbstractUnitOfWork,
    RepositoryFactory,
    UnitOfWork,
    get_unit_of_work,
)

__all__ = [
    "AbstractUnitOfWork",
    "RepositoryFactory",
    "UnitOfWork",
    "get_unit_of_work",
]
