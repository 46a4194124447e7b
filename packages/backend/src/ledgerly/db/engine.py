"""Async SQLAlchemy engine and session factory.

One engine owns the connection pool; each request borrows a session from
it through get_db() and the session is closed when the request ends, so a
borrowed connection never outlives the request that took it.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ledgerly.config import settings

# Connection pool: 5 standing connections, up to 15 more under load.
# echo=True in debug to see SQL queries.
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
)

# Session factory — each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def create_schema() -> None:
    """Create any missing tables from the ORM metadata."""
    from ledgerly.db.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
