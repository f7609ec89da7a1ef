"""Redis fixtures backed by fakeredis."""

from typing import AsyncGenerator

import pytest
from fakeredis import FakeAsyncRedis

from agentcraft.cache.client import RedisManager


@pytest.fixture
async def fake_redis() -> AsyncGenerator[FakeAsyncRedis, None]:
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
async def redis_manager(fake_redis: FakeAsyncRedis) -> AsyncGenerator[RedisManager, None]:
    """A manager that looks connected and hands out ``fake_redis``."""
    manager = RedisManager(redis_url="redis://fake:6379/0", key_prefix="test:")
    manager._client = fake_redis
    manager._available = True
    yield manager
    await manager.close()


@pytest.fixture
def unavailable_redis_manager() -> RedisManager:
    return RedisManager(redis_url=None, key_prefix="test:")
