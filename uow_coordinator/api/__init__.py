# ==============================================================================
# API PACKAGE INITIALIZATION
# ==============================================================================

"""
FastAPI Integration
===================

- get_connection_pool / PoolDep: Shared pool dependency
- provide_unit_of_work: Per-request Unit of Work dependency factory
- register_exception_handlers: JSON rendering of coordinator errors
- lifespan: Pool startup and shutdown
"""

from uow_coordinator.api.dependencies import (
    PoolDep,
    get_connection_pool,
    lifespan,
    provide_unit_of_work,
    register_exception_handlers,
)

__all__ = [
    "PoolDep",
    "get_connection_pool",
    "lifespan",
    "provide_unit_of_work",
    "register_exception_handlers",
]
