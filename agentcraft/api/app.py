"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from agentcraft import __version__
from agentcraft.api.middleware.error_handler import error_response
from agentcraft.cache.client import RedisManager
from agentcraft.cache.rate_limiter import RateLimiter
from agentcraft.db.engine import get_engine
from agentcraft.services.completion import PydanticAICompletionGateway
from agentcraft.services.notifications import LoggingResetNotifier
from agentcraft.settings import Settings, load_settings

logger = logging.getLogger(__name__)


async def _open_store(settings: Settings) -> Optional[AsyncEngine]:
    if not settings.database_url:
        logger.warning("db_engine_skipped: database_url not configured, /ready will fail")
        return None
    engine = await get_engine(
        settings.database_url,
        pool_size=settings.database_pool_size,
        pool_overflow=settings.database_pool_overflow,
    )
    logger.info(f"db_engine_initialized: dialect={engine.dialect.name}")
    return engine


async def _open_rate_limiting(settings: Settings) -> Optional[RedisManager]:
    """A connected manager, or None when requests go unlimited."""
    if not settings.redis_url:
        logger.info("rate_limiter_skipped: redis_url not configured")
        return None
    manager = RedisManager(redis_url=settings.redis_url, key_prefix=settings.redis_key_prefix)
    if await manager.get_client() is None:
        logger.warning("rate_limiter_skipped: redis unreachable, requests go unlimited")
        await manager.close()
        return None
    return manager


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the process-wide collaborators on ``app.state`` and release them on exit.

    ``engine``, ``redis`` and ``rate_limiter`` may be None; the completion
    gateway and reset notifier are always present.
    """
    settings: Settings = getattr(app.state, "settings", None) or load_settings()
    app.state.settings = settings

    if not settings.jwt_secret_key:
        raise RuntimeError(
            "JWT_SECRET_KEY must be set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )

    engine = await _open_store(settings)
    redis_manager = await _open_rate_limiting(settings)
    app.state.engine = engine
    app.state.redis = redis_manager
    app.state.rate_limiter = RateLimiter(redis_manager) if redis_manager else None
    app.state.completion_gateway = PydanticAICompletionGateway.from_settings(settings)
    app.state.reset_notifier = LoggingResetNotifier()
    logger.info(
        f"app_started: model={settings.llm_provider}/{settings.llm_model}, "
        f"rate_limited={redis_manager is not None}"
    )

    yield

    if redis_manager is not None:
        await redis_manager.close()
    if engine is not None:
        await engine.dispose()
    logger.info("app_stopped")


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed payloads as 400 invalid_input."""
    problems = [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]
    return error_response(
        request, 400, "invalid_input", "Invalid request payload", {"errors": problems}
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the AgentCraft API.

    Args:
        settings: Optional settings; loaded from the environment when omitted.
    """
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(
        title="AgentCraft API",
        version=__version__,
        description="Templated conversational agents for small businesses",
        lifespan=lifespan,
    )
    app.state.settings = settings

    from agentcraft.api.middleware import (
        RateLimitMiddleware,
        RequestIdMiddleware,
        RequestLoggingMiddleware,
        configure_cors,
        error_handling_middleware,
    )

    # Registered innermost first: requests pass CORS, error mapping,
    # rate limiting, request id, then access logging.
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.middleware("http")(error_handling_middleware)
    configure_cors(app, settings)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]

    from agentcraft.api.routers import (
        agents_router,
        analytics_router,
        auth_router,
        chat_router,
        conversations_router,
        health_router,
        templates_router,
    )

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(templates_router, tags=["templates"])
    app.include_router(agents_router, tags=["agents"])
    app.include_router(chat_router, tags=["chat"])
    app.include_router(conversations_router, tags=["conversations"])
    app.include_router(analytics_router, tags=["analytics"])
    return app
