import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.api.v1.buses.dependencies import get_fee_policy, get_transport_repository  # noqa: E402
from app.api.v1.buses.fee_policy import SchoolFirstPolicy  # noqa: E402
from app.db.init_db import create_tables  # noqa: E402
from app.db.session import get_db, get_session_factory  # noqa: E402
from app.main import app  # noqa: E402

from tests.fakes import InMemoryTransportRepository  # noqa: E402


@pytest.fixture()
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite per test so concurrent read sessions see the same data."""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'transport.db'}", future=True)
    await create_tables(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding and inspecting rows outside the request."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def client(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app and the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def fake_repo() -> InMemoryTransportRepository:
    return InMemoryTransportRepository()


@pytest.fixture()
async def fake_client(fake_repo: InMemoryTransportRepository) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client whose bus routes run against the in-memory repository."""
    app.dependency_overrides[get_transport_repository] = lambda: fake_repo
    app.dependency_overrides[get_fee_policy] = lambda: SchoolFirstPolicy()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
