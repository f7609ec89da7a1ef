"""Core services: completion gateway, chat orchestration and analytics."""

from agentcraft.services.analytics import AnalyticsDeriver
from agentcraft.services.chat_orchestrator import ChatOrchestrator
from agentcraft.services.completion import (
    FALLBACK_REPLY,
    CompletionGateway,
    PydanticAICompletionGateway,
)

__all__ = [
    "AnalyticsDeriver",
    "ChatOrchestrator",
    "CompletionGateway",
    "FALLBACK_REPLY",
    "PydanticAICompletionGateway",
]
