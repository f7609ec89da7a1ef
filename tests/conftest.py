"""Shared fixtures: test settings and a throwaway SQLite store."""

import os
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from support import JWT_SECRET

# load_settings() is reached from a few code paths; give it a key.
os.environ.setdefault("LLM_API_KEY", "test-llm-key")
os.environ.setdefault("JWT_SECRET_KEY", JWT_SECRET)

from agentcraft.db.engine import create_tables, get_engine  # noqa: E402
from agentcraft.settings import Settings  # noqa: E402


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch: pytest.MonkeyPatch) -> None:
    """Use the minimum bcrypt cost so hashing does not dominate test time."""
    monkeypatch.setattr("agentcraft.auth.password.ROUNDS", 4)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        llm_api_key="test-llm-key",
        jwt_secret_key=JWT_SECRET,
        database_url=None,
        redis_url=None,
        _env_file=None,
    )


@pytest.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with the full schema created."""
    engine = await get_engine(f"sqlite+aiosqlite:///{tmp_path / 'agentcraft.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
