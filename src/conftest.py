import contextlib

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.auth import create_access_token, issue_antiforgery_token
from src.dinners.repository import orm_models  # noqa: F401  registers the tables
from src.main import app
from src.models.base import BaseModel

# Test database engine
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def db_session():
    """An AsyncSession on a fresh in-memory database, rolled back after the test."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
def client_factory():
    """Build a test client with the given dependency overrides applied."""

    @contextlib.asynccontextmanager
    async def factory(overrides: dict | None = None):
        app.dependency_overrides.update(overrides or {})
        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return factory


@pytest.fixture
async def client(client_factory):
    """Create a test client."""
    async with client_factory() as ac:
        yield ac


@pytest.fixture
def auth_headers():
    """Headers authenticating as `identity`, with an anti-forgery token when asked."""

    def factory(identity: str, antiforgery: bool = False) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {create_access_token(identity)}"}
        if antiforgery:
            headers["X-CSRF-Token"] = issue_antiforgery_token(identity)
        return headers

    return factory
