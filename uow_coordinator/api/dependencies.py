# ==============================================================================
# API DEPENDENCIES - Dependency Injection
# ==============================================================================
# FastAPI wiring: shared pool, per-request unit of work, error rendering
# ==============================================================================

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import (
    Annotated,
    AsyncIterator,
    Callable,
    Mapping,
    Optional,
)

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from uow_coordinator.core.exceptions import AppException
from uow_coordinator.core.settings import settings
from uow_coordinator.database.adapters.base_adapter import BaseConnectionPool
from uow_coordinator.database.factory import DatabaseFactory
from uow_coordinator.database.unit_of_work.uow import RepositoryFactory, UnitOfWork

logger = logging.getLogger(__name__)


# ==============================================================================
# DATABASE DEPENDENCIES
# ==============================================================================

async def get_connection_pool() -> BaseConnectionPool:
    """
    Get connection pool dependency.

    Returns initialized pool from factory.
    """
    return DatabaseFactory.get_pool()


# Annotated type for the shared pool
PoolDep = Annotated[BaseConnectionPool, Depends(get_connection_pool)]


def provide_unit_of_work(
    repositories: Optional[Mapping[str, RepositoryFactory]] = None,
) -> Callable[..., AsyncIterator[UnitOfWork]]:
    """
    Build a dependency yielding a fresh Unit of Work per request.

    The yielded unit of work is idle with the given factories
    registered; endpoints drive it through ``do`` or ``async with``.
    A transaction still open when the request ends is rolled back.

    Args:
        repositories: Factories to register on every unit of work

    Returns:
        FastAPI dependency callable

    Example:
        >>> get_uow = provide_unit_of_work({"users": UserRepository})
        >>> UowDep = Annotated[UnitOfWork, Depends(get_uow)]
    """
    factories = dict(repositories or {})

    async def get_unit_of_work(pool: PoolDep) -> AsyncIterator[UnitOfWork]:
        uow = UnitOfWork(pool)
        for name, factory in factories.items():
            uow.register(name, factory)

        try:
            yield uow
        finally:
            if uow.is_active:
                logger.warning("Request ended with an open transaction, rolling back")
                await uow.rollback()

    return get_unit_of_work


# ==============================================================================
# EXCEPTION HANDLERS
# ==============================================================================

def register_exception_handlers(app: FastAPI) -> None:
    """Render coordinator errors as JSON responses."""

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request,
        exc: AppException,
    ) -> JSONResponse:
        """Handle application exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )


# ==============================================================================
# LIFESPAN MANAGEMENT
# ==============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    - Startup: Initialize the shared connection pool
    - Shutdown: Dispose it
    """
    logger.info(
        f"Starting {settings.APP_NAME} v{settings.APP_VERSION} "
        f"({settings.ENVIRONMENT.value})"
    )
    await DatabaseFactory.initialize()
    logger.info("Database initialized successfully")

    yield

    logger.info("Shutting down database pool...")
    await DatabaseFactory.shutdown()
