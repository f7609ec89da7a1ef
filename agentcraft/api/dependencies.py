"""Request-scoped access to the collaborators the lifespan put on ``app.state``."""

import logging
from typing import Any, AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from agentcraft.cache.client import RedisManager
from agentcraft.db.engine import get_session
from agentcraft.services.analytics import AnalyticsDeriver
from agentcraft.services.chat_orchestrator import ChatOrchestrator
from agentcraft.services.completion import CompletionGateway
from agentcraft.services.notifications import LoggingResetNotifier, ResetNotifier
from agentcraft.settings import Settings, load_settings

logger = logging.getLogger(__name__)


def _required_state(request: Request, name: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        logger.error(f"app_state_missing: name={name}")
        raise RuntimeError(f"app.state.{name} is not initialized; has the lifespan run?")
    return value


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """One session per request, closed when the response is sent.

    Raises:
        RuntimeError: If no engine was built (``DATABASE_URL`` unset).
    """
    async for session in get_session(_required_state(request, "engine")):
        yield session


def get_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else load_settings()


def get_redis_manager(request: Request) -> Optional[RedisManager]:
    """None whenever requests are not rate limited."""
    return getattr(request.app.state, "redis", None)


def get_completion_gateway(request: Request) -> CompletionGateway:
    return _required_state(request, "completion_gateway")


def get_reset_notifier(request: Request) -> ResetNotifier:
    notifier = getattr(request.app.state, "reset_notifier", None)
    return notifier or LoggingResetNotifier()


def get_chat_orchestrator(
    db: AsyncSession = Depends(get_db),
    gateway: CompletionGateway = Depends(get_completion_gateway),
) -> ChatOrchestrator:
    return ChatOrchestrator(db, gateway)


def get_analytics_deriver(db: AsyncSession = Depends(get_db)) -> AnalyticsDeriver:
    return AnalyticsDeriver(db)
