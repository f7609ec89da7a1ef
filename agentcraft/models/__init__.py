"""Domain value models shared by services and the API layer."""

from agentcraft.models.analytics_models import (
    DashboardAnalytics,
    DayVolume,
    HourBlockLatency,
    RecentActivity,
)
from agentcraft.models.auth_models import AuthContext
from agentcraft.models.conversation_models import ChatMessage, MessageRole, StoredMessage, TurnResult

__all__ = [
    "AuthContext",
    "ChatMessage",
    "DashboardAnalytics",
    "DayVolume",
    "HourBlockLatency",
    "MessageRole",
    "RecentActivity",
    "StoredMessage",
    "TurnResult",
]
