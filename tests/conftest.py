"""Shared fixtures for catalog tests."""

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.pool import StaticPool

from catalog_api.infrastructure.config import Settings
from catalog_api.infrastructure.database import (
    create_engine,
    create_session_factory,
    create_tables,
)
from catalog_api.infrastructure.memory_repository import InMemoryProductRepository
from catalog_api.infrastructure.sql_repository import SqlProductRepository
from catalog_api.main import create_app


@pytest.fixture
def test_settings() -> Settings:
    """Settings for tests (in-memory storage, console logs)."""
    return Settings(storage_backend="memory", log_format="console")


@pytest.fixture
def memory_repository() -> InMemoryProductRepository:
    """Create an empty in-memory repository."""
    return InMemoryProductRepository()


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine with the products table."""
    engine = create_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sql_repository(sqlite_engine: AsyncEngine) -> SqlProductRepository:
    """Create a SQL repository on the SQLite engine."""
    return SqlProductRepository(create_session_factory(sqlite_engine))


@pytest.fixture
def client(
    memory_repository: InMemoryProductRepository,
    test_settings: Settings,
) -> Generator[TestClient, None, None]:
    """Create test client backed by the in-memory repository."""
    app = create_app(repository=memory_repository, app_settings=test_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sql_client(tmp_path) -> Generator[TestClient, None, None]:
    """Create test client whose lifespan builds a SQL repository on SQLite."""
    settings = Settings(
        storage_backend="sql",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}",
        log_format="console",
    )
    with TestClient(create_app(app_settings=settings)) as test_client:
        yield test_client
