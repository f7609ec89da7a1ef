"""Lazily connected Redis client backing the rate limiter."""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS = 2.0
COMMAND_TIMEOUT_SECONDS = 2.0


@dataclass(frozen=True)
class RedisHealth:
    """Outcome of a readiness ping: "ok", "unavailable" or "not_configured"."""

    status: str
    latency_ms: float = 0.0


class RedisManager:
    """Holds the one Redis client of the process.

    Rate limiting is the only Redis consumer. Without a URL, or after a failed
    connection attempt, ``available`` is False and no client is handed out;
    the limiter then lets every request through.

    Args:
        redis_url: Connection URL, or None to run without Redis.
        key_prefix: Namespace prepended to every key this service writes.
    """

    def __init__(self, redis_url: Optional[str] = None, key_prefix: str = "agentcraft:") -> None:
        self._redis_url = redis_url
        self._key_prefix = key_prefix
        self._client: Optional[aioredis.Redis] = None
        self._available = False

    @property
    def configured(self) -> bool:
        return self._redis_url is not None

    @property
    def available(self) -> bool:
        return self.configured and self._available

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    async def get_client(self) -> Optional[aioredis.Redis]:
        """The connected client, connecting on first use; None when unreachable."""
        if not self.configured:
            return None
        if self._available and self._client is not None:
            return self._client
        return await self._connect()

    async def _connect(self) -> Optional[aioredis.Redis]:
        client = aioredis.from_url(
            self._redis_url,
            decode_responses=True,
            socket_connect_timeout=CONNECT_TIMEOUT_SECONDS,
            socket_timeout=COMMAND_TIMEOUT_SECONDS,
        )
        try:
            await client.ping()  # type: ignore[misc]
        except (aioredis.ConnectionError, aioredis.TimeoutError, OSError) as e:
            logger.warning(f"redis_unavailable: error={type(e).__name__}")
            await client.aclose()
            self._client = None
            self._available = False
            return None

        self._client = client
        self._available = True
        logger.info("redis_connected: purpose=rate_limiting")
        return client

    async def ping(self) -> RedisHealth:
        """Round-trip a PING for the readiness probe."""
        if not self.configured:
            return RedisHealth(status="not_configured")

        started = time.monotonic()
        client = await self.get_client()
        if client is None:
            return RedisHealth(status="unavailable")
        try:
            await client.ping()  # type: ignore[misc]
        except (aioredis.RedisError, OSError) as e:
            logger.warning(f"redis_ping_failed: error={type(e).__name__}")
            self._available = False
            return RedisHealth(status="unavailable")
        return RedisHealth(status="ok", latency_ms=round((time.monotonic() - started) * 1000.0, 2))

    async def close(self) -> None:
        if self._client is None:
            return
        client, self._client, self._available = self._client, None, False
        try:
            await client.aclose()
        except (aioredis.RedisError, OSError) as e:
            logger.warning(f"redis_close_error: error={type(e).__name__}")
        else:
            logger.info("redis_closed")
