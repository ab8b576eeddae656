# ==============================================================================
# CUSTOM EXCEPTIONS - Unit of Work Error Hierarchy
# ==============================================================================
# Structured exception classes for transaction coordination failures
# Each exception carries a machine-readable code and an HTTP status mapping
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple


class AppException(Exception):
    """
    Base exception for all coordinator errors.

    Provides a consistent interface for error handling with:
    - Error code for programmatic identification
    - HTTP status code mapping
    - Detailed message and optional context

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        status_code: HTTP status code to return
        details: Additional context dictionary

    Example:
        >>> raise AppException(
        ...     message="Something went wrong",
        ...     error_code="INTERNAL_ERROR",
        ...     status_code=500
        ... )
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format for JSON response.

        Returns:
            Dictionary containing error details
        """
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"status_code={self.status_code})"
        )


# ==============================================================================
# DATABASE EXCEPTIONS
# ==============================================================================

class DatabaseError(AppException):
    """
    Base exception for database-related errors.

    Raised when database operations fail due to:
    - Connection issues
    - Pool initialization failures
    - Transaction errors
    """

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            status_code=503,
            details=details,
        )


class ConnectionError(DatabaseError):
    """
    Raised when the pool cannot produce a transaction.
    """

    def __init__(
        self,
        message: str = "Failed to connect to database",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.error_code = "DATABASE_CONNECTION_ERROR"


class TransactionError(DatabaseError):
    """
    Base exception for transaction lifecycle failures.

    Covers both precondition violations (begin while active,
    rollback while idle) and driver-level commit/rollback failures.
    """

    def __init__(
        self,
        message: str = "Transaction failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.error_code = "TRANSACTION_ERROR"
        self.status_code = 500


class TransactionAlreadyStartedError(TransactionError):
    """
    Raised when begin/do is called while a transaction is active.

    Nested transactions are not supported. The active transaction
    is left untouched; finish or roll it back first.
    """

    def __init__(
        self,
        message: str = "transaction already started",
    ) -> None:
        super().__init__(message=message)
        self.error_code = "TRANSACTION_ALREADY_STARTED"
        self.status_code = 409


class NoActiveTransactionError(TransactionError):
    """
    Raised when an operation needs an open transaction and there is none.
    """

    def __init__(
        self,
        message: str = "no transaction started",
    ) -> None:
        super().__init__(message=message)
        self.error_code = "NO_ACTIVE_TRANSACTION"


class CommitError(TransactionError):
    """
    Raised when the underlying store refuses to commit.
    """

    def __init__(
        self,
        message: str = "Commit failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.error_code = "COMMIT_ERROR"


class RollbackError(TransactionError):
    """
    Raised when the underlying store fails to roll back.
    """

    def __init__(
        self,
        message: str = "Rollback failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.error_code = "ROLLBACK_ERROR"


class CombinedRollbackError(TransactionError):
    """
    Raised when a cleanup rollback fails after another failure.

    Carries both causes so neither is lost: the error that triggered
    the rollback (a failing unit-of-work function or a failed commit)
    and the rollback failure itself.

    Attributes:
        error: The triggering error
        rollback_error: The error raised by the cleanup rollback

    Example:
        >>> try:
        ...     await uow.do(work)
        ... except CombinedRollbackError as e:
        ...     log(e.error, e.rollback_error)
    """

    def __init__(
        self,
        error: BaseException,
        rollback_error: BaseException,
    ) -> None:
        super().__init__(
            message=f"rollback error: {rollback_error}, original error: {error}",
            details={
                "original_error": {
                    "type": type(error).__name__,
                    "message": str(error),
                },
                "rollback_error": {
                    "type": type(rollback_error).__name__,
                    "message": str(rollback_error),
                },
            },
        )
        self.error_code = "COMBINED_ROLLBACK_ERROR"
        self.error = error
        self.rollback_error = rollback_error

    @property
    def errors(self) -> Tuple[BaseException, BaseException]:
        """Both underlying causes, triggering error first."""
        return (self.error, self.rollback_error)


# ==============================================================================
# REGISTRY EXCEPTIONS
# ==============================================================================

class NotFoundError(AppException):
    """
    Raised when a requested resource does not exist.

    Maps to HTTP 404 Not Found.

    Attributes:
        resource_type: Type of resource that was not found
        resource_id: Identifier of the missing resource
    """

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ) -> None:
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = str(resource_id)

        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            status_code=404,
            details=details,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class RepositoryNotRegisteredError(NotFoundError):
    """
    Raised when get_repository is called with an unknown name.

    This is a wiring mistake rather than a missing record, so it
    maps to HTTP 500 instead of 404.
    """

    def __init__(
        self,
        name: str,
        available: Optional[Tuple[str, ...]] = None,
    ) -> None:
        super().__init__(
            message=(
                f"Repository '{name}' not registered. "
                f"Available: {list(available or ())}"
            ),
            resource_type="repository",
            resource_id=name,
        )
        self.error_code = "REPOSITORY_NOT_REGISTERED"
        self.status_code = 500
        self.name = name
