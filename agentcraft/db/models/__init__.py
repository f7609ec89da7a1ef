"""ORM models for database tables."""

from agentcraft.db.models.agent import AgentORM, AgentStatusEnum
from agentcraft.db.models.conversation import ConversationORM, MessageORM, MessageRoleEnum
from agentcraft.db.models.user import RefreshTokenORM, UserORM

__all__ = [
    "AgentORM",
    "AgentStatusEnum",
    "ConversationORM",
    "MessageORM",
    "MessageRoleEnum",
    "RefreshTokenORM",
    "UserORM",
]
