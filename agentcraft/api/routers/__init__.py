"""FastAPI routers for the AgentCraft API."""

from agentcraft.api.routers.agents import router as agents_router
from agentcraft.api.routers.analytics import router as analytics_router
from agentcraft.api.routers.auth import router as auth_router
from agentcraft.api.routers.chat import router as chat_router
from agentcraft.api.routers.conversations import router as conversations_router
from agentcraft.api.routers.health import router as health_router
from agentcraft.api.routers.templates import router as templates_router

__all__ = [
    "agents_router",
    "analytics_router",
    "auth_router",
    "chat_router",
    "conversations_router",
    "health_router",
    "templates_router",
]
