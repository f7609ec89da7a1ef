"""Engine construction for the conversation store."""

from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from agentcraft.db.base import Base

# Pooled connections are recycled before typical server-side idle timeouts.
POOL_RECYCLE_SECONDS = 3600


def _engine_options(database_url: str, pool_size: int, pool_overflow: int) -> dict[str, Any]:
    # aiosqlite has no real pool; sizing arguments are rejected there.
    if database_url.startswith("sqlite"):
        return {}
    return {
        "pool_size": pool_size,
        "max_overflow": pool_overflow,
        "pool_pre_ping": True,
        "pool_recycle": POOL_RECYCLE_SECONDS,
    }


async def get_engine(
    database_url: str,
    pool_size: int = 5,
    pool_overflow: int = 10,
) -> AsyncEngine:
    """Build the async engine for ``database_url``.

    PostgreSQL (asyncpg) in deployment, SQLite (aiosqlite) for local runs
    and tests.
    """
    return create_async_engine(
        database_url, **_engine_options(database_url, pool_size, pool_overflow)
    )


def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Rows stay readable after commit; routers serialise them post-commit.
    return async_sessionmaker(engine, expire_on_commit=False)


async def get_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory(engine)() as session:
        yield session


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables. Schema changes are not migrated."""
    import agentcraft.db.models  # noqa: F401  registers every table on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
