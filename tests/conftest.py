# ==============================================================================
# CONFTEST - Pytest Fixtures and Configuration
# ==============================================================================
# Shared fixtures: recording fakes for the pool/transaction contracts and a
# real SQLite-backed pool for end-to-end runs
# ==============================================================================

from __future__ import annotations

import os
from datetime import datetime
from typing import AsyncGenerator, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy import DateTime, String, func, select
from sqlalchemy.orm import Mapped, mapped_column

# Set test environment before importing the package
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "false"
os.environ["DATABASE_TYPE"] = "sqlite"
os.environ["SQLITE_URL"] = "sqlite+aiosqlite:///./test_app.db"
os.environ["LOG_LEVEL"] = "DEBUG"

from uow_coordinator.core.exceptions import (  # noqa: E402
    CommitError,
    ConnectionError,
    RollbackError,
)
from uow_coordinator.database.adapters import (  # noqa: E402
    BaseConnectionPool,
    BaseTransaction,
    SQLAlchemyConnectionPool,
    build_engine_options,
)
from uow_coordinator.database.factory import DatabaseFactory  # noqa: E402
from uow_coordinator.database.repositories import BaseRepository  # noqa: E402
from uow_coordinator.domain_models import SQLBase  # noqa: E402


# ==============================================================================
# RECORDING FAKES
# ==============================================================================

class FakeTransaction(BaseTransaction):
    """Transaction handle that records calls and fails on request."""

    def __init__(
        self,
        commit_error: Optional[Exception] = None,
        rollback_error: Optional[Exception] = None,
    ) -> None:
        self.commit_error = commit_error
        self.rollback_error = rollback_error
        self.commit_calls = 0
        self.rollback_calls = 0
        self.writes: List[str] = []

    async def commit(self) -> None:
        self.commit_calls += 1
        if self.commit_error is not None:
            raise self.commit_error

    async def rollback(self) -> None:
        self.rollback_calls += 1
        if self.rollback_error is not None:
            raise self.rollback_error


class FakeConnectionPool(BaseConnectionPool):
    """Pool handing out FakeTransactions configured from its attributes."""

    def __init__(self) -> None:
        self.begin_error: Optional[Exception] = None
        self.commit_error: Optional[Exception] = None
        self.rollback_error: Optional[Exception] = None
        self.transactions: List[FakeTransaction] = []

    async def begin_transaction(self) -> FakeTransaction:
        if self.begin_error is not None:
            raise self.begin_error
        tx = FakeTransaction(self.commit_error, self.rollback_error)
        self.transactions.append(tx)
        return tx

    @property
    def last(self) -> FakeTransaction:
        return self.transactions[-1]


class FakeUserRepository:
    """Minimal repository writing into the fake transaction."""

    def __init__(self, transaction: FakeTransaction) -> None:
        self.transaction = transaction

    async def add(self, email: str) -> None:
        self.transaction.writes.append(email)


# ==============================================================================
# SQL MODELS & REPOSITORIES
# ==============================================================================

class User(SQLBase):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class Account(SQLBase):
    __tablename__ = "accounts"

    owner_email: Mapped[str] = mapped_column(String(255))
    label: Mapped[str] = mapped_column(String(100), default="default")


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


class AccountRepository(BaseRepository[Account]):
    model = Account


# ==============================================================================
# FIXTURES
# ==============================================================================

@pytest.fixture
def fake_pool() -> FakeConnectionPool:
    """Recording pool for state machine tests."""
    return FakeConnectionPool()


@pytest.fixture
def errors() -> dict:
    """One instance of each driver-level error."""
    return {
        "connection": ConnectionError("pool exhausted"),
        "commit": CommitError("commit refused"),
        "rollback": RollbackError("rollback refused"),
    }


@pytest_asyncio.fixture
async def sqlite_pool(tmp_path) -> AsyncGenerator[SQLAlchemyConnectionPool, None]:
    """SQLite-backed pool with the test schema created."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'uow_test.db'}"
    pool = SQLAlchemyConnectionPool.from_url(url, **build_engine_options(url))

    async with pool.engine.begin() as conn:
        await conn.run_sync(SQLBase.metadata.create_all)

    yield pool

    await pool.dispose()


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    """URL of an empty SQLite file for factory tests."""
    return f"sqlite+aiosqlite:///{tmp_path / 'factory_test.db'}"


@pytest.fixture(autouse=True)
def _reset_factory():
    """Keep the factory cache from leaking between tests."""
    DatabaseFactory.reset()
    yield
    DatabaseFactory.reset()
