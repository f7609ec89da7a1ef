"""Fixed-window request budgets kept as Redis counters."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import redis.asyncio as aioredis
from pydantic import BaseModel, Field

from agentcraft.cache.client import RedisManager

logger = logging.getLogger(__name__)


class RateLimitResult(BaseModel):
    """Verdict for one counted request.

    ``remaining`` is what is left of the window after this request and
    ``reset_at`` is when the window's counter expires.
    """

    allowed: bool
    remaining: int = Field(ge=0)
    reset_at: datetime
    limit: int = Field(gt=0)


class RateLimiter:
    """Counts requests per (subject, resource) in fixed windows.

    A window starts with the first request that finds no counter and ends
    ``window_seconds`` later no matter how many requests follow. Counters
    live under ``{prefix}rate:{subject}:{resource}``. Without a reachable
    Redis every request is allowed.
    """

    def __init__(self, redis_manager: RedisManager) -> None:
        self._redis_manager: RedisManager = redis_manager

    def _key(self, subject: str, resource: str) -> str:
        return f"{self._redis_manager.key_prefix}rate:{subject}:{resource}"

    @staticmethod
    def _open(limit: int, window_seconds: int) -> RateLimitResult:
        reset_at = datetime.now(timezone.utc) + timedelta(seconds=window_seconds)
        return RateLimitResult(allowed=True, remaining=limit, reset_at=reset_at, limit=limit)

    async def _hit(self, client: aioredis.Redis, key: str, window_seconds: int) -> tuple[int, int]:
        """Increment the counter; returns (count, seconds left in the window)."""
        async with client.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.ttl(key)
            count, ttl = await pipe.execute()

        # -1 means the counter was just created, or lost its expiry somehow.
        if ttl < 0:
            await client.expire(key, window_seconds)
            ttl = window_seconds
        return int(count), int(ttl)

    async def check_rate_limit(
        self,
        subject: str,
        resource: str,
        limit: int,
        window_seconds: int,
    ) -> RateLimitResult:
        """Count one request against ``subject``'s budget for ``resource``.

        Args:
            subject: Who is limited ("user:<uuid>" or "ip:<hash>").
            resource: Budget name ("chat", "auth", "password_reset", "api").
            limit: Requests allowed per window.
            window_seconds: Window length.
        """
        client: Optional[aioredis.Redis] = None
        if self._redis_manager.available:
            client = await self._redis_manager.get_client()
        if client is None:
            logger.debug(f"rate_limit_open: resource={resource}, reason=redis_unavailable")
            return self._open(limit, window_seconds)

        try:
            count, ttl = await self._hit(client, self._key(subject, resource), window_seconds)
        except (aioredis.RedisError, OSError) as e:
            logger.warning(f"rate_limit_open: resource={resource}, error={type(e).__name__}")
            return self._open(limit, window_seconds)

        allowed = count <= limit
        logger.debug(
            f"rate_limit_check: subject={subject}, resource={resource}, "
            f"count={count}, limit={limit}, allowed={allowed}"
        )
        return RateLimitResult(
            allowed=allowed,
            remaining=max(0, limit - count),
            reset_at=datetime.now(timezone.utc) + timedelta(seconds=ttl),
            limit=limit,
        )
