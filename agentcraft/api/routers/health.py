"""Liveness and readiness probes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from agentcraft import __version__
from agentcraft.api.dependencies import get_redis_manager
from agentcraft.api.schemas.common import HealthResponse, ServiceStatus
from agentcraft.cache.client import RedisManager
from agentcraft.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter()


async def check_database(engine: Optional[AsyncEngine]) -> ServiceStatus:
    """``SELECT 1`` on a pooled connection; never raises."""
    if engine is None:
        return ServiceStatus(status="error", error="Database engine not initialized")
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"readiness_check: database=error, error_type={type(e).__name__}")
        return ServiceStatus(status="error", error="Database query failed")
    return ServiceStatus(status="connected")


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness: the process is serving. Dependencies are not consulted."""
    return HealthResponse(status="ok", version=__version__)


@router.get("/ready", response_model=HealthResponse)
async def readiness_check(
    request: Request,
    redis_manager: Optional[RedisManager] = Depends(get_redis_manager),
) -> HealthResponse:
    """
    Readiness: the conversation store answers queries.

    Redis is reported but never fails readiness, since the rate limiter
    lets requests through without it.

    Raises:
        StoreUnavailableError: 503 if the database is unreachable.
    """
    database = await check_database(getattr(request.app.state, "engine", None))

    if redis_manager is None:
        redis = ServiceStatus(status="not_configured")
    else:
        health = await redis_manager.ping()
        redis = ServiceStatus(
            status="connected" if health.status == "ok" else health.status,
            latency_ms=health.latency_ms,
        )

    if database.status != "connected":
        logger.error(f"readiness_check: status=error, reason={database.error}")
        raise StoreUnavailableError("Database service unavailable")

    return HealthResponse(
        status="ok", version=__version__, services={"database": database, "redis": redis}
    )
