"""Redis-backed caching primitives (rate limiting)."""

from agentcraft.cache.client import RedisHealth, RedisManager
from agentcraft.cache.rate_limiter import RateLimiter, RateLimitResult

__all__ = ["RateLimitResult", "RateLimiter", "RedisHealth", "RedisManager"]
