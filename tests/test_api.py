# ==============================================================================
# API DEPENDENCY TESTS
# ==============================================================================
# Per-request unit of work wired into a FastAPI app
# ==============================================================================

import logging
from typing import Annotated, AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel
from sqlalchemy import func, select

from conftest import User, UserRepository
from uow_coordinator.api import (
    get_connection_pool,
    lifespan,
    provide_unit_of_work,
    register_exception_handlers,
)
from uow_coordinator.core.exceptions import NotFoundError
from uow_coordinator.core.settings import settings
from uow_coordinator.database.factory import DatabaseFactory
from uow_coordinator.database.unit_of_work import UnitOfWork

get_uow = provide_unit_of_work({"users": UserRepository})
UowDep = Annotated[UnitOfWork, Depends(get_uow)]


class UserIn(BaseModel):
    email: str
    team: str | None = None


def create_test_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.post("/users", status_code=201)
    async def create_user(payload: UserIn, uow: UowDep) -> dict:
        async def work(uow):
            users = uow.get_repository("users")
            user = await users.create({"email": payload.email})
            if payload.team == "missing":
                raise NotFoundError("Team not found", resource_type="team")
            return user

        user = await uow.do(work)
        return user.to_dict()

    @app.post("/users/nested")
    async def nested(uow: UowDep) -> dict:
        await uow.begin()

        async def work(uow):
            return None

        await uow.do(work)
        return {}

    @app.post("/users/unfinished")
    async def unfinished(payload: UserIn, uow: UowDep) -> dict:
        await uow.begin()
        await uow.get_repository("users").create({"email": payload.email})
        return {"active": uow.is_active}

    return app


async def count_users(pool) -> int:
    async with pool.engine.connect() as conn:
        result = await conn.execute(select(func.count()).select_from(User))
        return result.scalar_one()


@pytest_asyncio.fixture
async def client(sqlite_pool) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the test app, pool overridden to SQLite."""
    app = create_test_app()
    app.dependency_overrides[get_connection_pool] = lambda: sqlite_pool

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


class TestUnitOfWorkDependency:
    """Tests for provide_unit_of_work and error rendering."""

    @pytest.mark.asyncio
    async def test_successful_request_commits(self, client, sqlite_pool):
        response = await client.post("/users", json={"email": "api@example.com"})

        assert response.status_code == 201
        assert response.json()["email"] == "api@example.com"
        assert response.json()["created_at"]
        assert await count_users(sqlite_pool) == 1

    @pytest.mark.asyncio
    async def test_failed_request_rolls_back(self, client, sqlite_pool):
        response = await client.post(
            "/users",
            json={"email": "api@example.com", "team": "missing"},
        )

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "NOT_FOUND"
        assert await count_users(sqlite_pool) == 0

    @pytest.mark.asyncio
    async def test_nested_transaction_rendered_as_conflict(self, client, sqlite_pool):
        response = await client.post("/users/nested")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "TRANSACTION_ALREADY_STARTED"

    @pytest.mark.asyncio
    async def test_open_transaction_rolled_back_on_teardown(self, client, sqlite_pool):
        response = await client.post("/users/unfinished", json={"email": "open@example.com"})

        assert response.status_code == 200
        assert response.json() == {"active": True}
        assert await count_users(sqlite_pool) == 0

    @pytest.mark.asyncio
    async def test_each_request_gets_fresh_unit_of_work(self, client, sqlite_pool):
        for i in range(3):
            response = await client.post("/users", json={"email": f"u{i}@example.com"})
            assert response.status_code == 201

        assert await count_users(sqlite_pool) == 3


class TestLifespan:
    """Tests for the pool lifespan."""

    @pytest.mark.asyncio
    async def test_lifespan_initializes_and_disposes(self, sqlite_url):
        DatabaseFactory.create_pool(sqlite_url)
        app = FastAPI(lifespan=lifespan)

        async with lifespan(app):
            assert DatabaseFactory.is_initialized()
            assert await get_connection_pool() is DatabaseFactory.get_pool()

        assert not DatabaseFactory.is_initialized()

    @pytest.mark.asyncio
    async def test_lifespan_logs_application_identity(self, sqlite_url, caplog):
        DatabaseFactory.create_pool(sqlite_url)
        app = FastAPI(lifespan=lifespan)

        with caplog.at_level(logging.INFO, logger="uow_coordinator.api.dependencies"):
            async with lifespan(app):
                pass

        expected = (
            f"Starting {settings.APP_NAME} v{settings.APP_VERSION} "
            f"({settings.ENVIRONMENT.value})"
        )
        assert expected in caplog.messages
