"""Pydantic models for chat messages and turn results."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class MessageRole(str, Enum):
    """Role vocabulary of the completion gateway."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One entry of the history sent to the completion gateway."""

    role: MessageRole
    content: str


class StoredMessage(BaseModel):
    """A persisted message as returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    conversation_id: UUID
    role: MessageRole
    content: str
    created_at: datetime


class TurnResult(BaseModel):
    """Outcome of one chat turn.

    Args:
        conversation_id: Conversation the turn was appended to
        user_message: The persisted user message
        assistant_message: The persisted assistant reply
        is_new_conversation: Whether the conversation was created by this turn
    """

    conversation_id: UUID
    user_message: StoredMessage
    assistant_message: StoredMessage
    is_new_conversation: bool
