# ==============================================================================
# CORE PACKAGE INITIALIZATION
# ==============================================================================
# Core utilities: Settings, Exceptions, Logging
# ==============================================================================

"""
Core Module
===========

Contains core utilities and configurations:
- settings: Environment configuration management
- exceptions: Transaction and registry error hierarchy
- logging: Root logger configuration
"""

from uow_coordinator.core.settings import settings, get_settings, DatabaseType
from uow_coordinator.core.exceptions import (
    AppException,
    DatabaseError,
    ConnectionError,
    TransactionError,
    TransactionAlreadyStartedError,
    NoActiveTransactionError,
    CommitError,
    RollbackError,
    CombinedRollbackError,
    NotFoundError,
    RepositoryNotRegisteredError,
)

__all__ = [
    "settings",
    "get_settings",
    "DatabaseType",
    "AppException",
    "DatabaseError",
    "ConnectionError",
    "TransactionError",
    "TransactionAlreadyStartedError",
    "NoActiveTransactionError",
    "CommitError",
    "RollbackError",
    "CombinedRollbackError",
    "NotFoundError",
    "RepositoryNotRegisteredError",
]
