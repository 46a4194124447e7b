"""Test fixtures — a fresh in-memory database per test.

Each test gets its own SQLite database (aiosqlite) with the full schema
created from the ORM metadata, so tests need no running services and
share no state. StaticPool keeps the single in-memory connection alive
for the whole test.

The client fixture only swaps the app's session source. The identity
gate is NOT overridden: tests authenticate with real JWTs minted for
two tenants, alice and bob, so every request goes through the same
token verification as production.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ledgerly.auth.jwt import create_access_token
from ledgerly.db.engine import get_db
from ledgerly.db.models import Base
from ledgerly.main import app

TEST_DB_URL = "sqlite+aiosqlite://"


def bearer(user_id: uuid.UUID) -> dict:
    """Authorization header for a user."""
    return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}


def sequential_ids(start: int = 1):
    """Deterministic id generator: UUID(int=1), UUID(int=2), ..."""
    counter = iter(range(start, 2**32))
    return lambda: uuid.UUID(int=next(counter))


@pytest_asyncio.fixture()
async def db_engine():
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A session for driving the store directly, without HTTP."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client whose requests each get a session on the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture()
def alice() -> dict:
    """Auth headers for tenant A."""
    return bearer(uuid.uuid4())


@pytest.fixture()
def bob() -> dict:
    """Auth headers for tenant B."""
    return bearer(uuid.uuid4())


@pytest.fixture()
def headers_for():
    """Build auth headers for an arbitrary user id."""
    return bearer


@pytest.fixture()
def fixed_ids():
    """Route all resource ids through a deterministic sequence."""
    from ledgerly.api.resources import get_id_generator

    ids = sequential_ids()
    app.dependency_overrides[get_id_generator] = lambda: ids
    yield
    app.dependency_overrides.pop(get_id_generator, None)
