# ==============================================================================
# REPOSITORIES PACKAGE INITIALIZATION
# ==============================================================================

"""
Repository Pattern Implementation
=================================

Provides transaction-scoped data access:
- BaseRepository: Generic CRUD repository bound to one transaction
"""

from uow_coordinator.database.repositories.base_repository import BaseRepository

__all__ = [
    "BaseRepository",
]
