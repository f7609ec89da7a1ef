"""Repository layer for database access patterns."""

from agentcraft.db.repositories.agent_repo import AgentRepository
from agentcraft.db.repositories.base import BaseRepository, store_errors
from agentcraft.db.repositories.conversation_repo import ConversationRepository
from agentcraft.db.repositories.user_repo import UserRepository

__all__ = [
    "AgentRepository",
    "BaseRepository",
    "ConversationRepository",
    "UserRepository",
    "store_errors",
]
