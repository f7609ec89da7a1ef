"""Read models for conversation listings and transcripts."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from agentcraft.models.conversation_models import MessageRole


class ConversationResponse(BaseModel):
    """A conversation without its messages; ``updated_at`` is the last activity."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    agent_id: UUID
    owner_id: UUID
    title: str
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    conversation_id: UUID
    role: MessageRole
    content: str
    created_at: datetime
