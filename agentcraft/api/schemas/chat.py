"""Payloads of the chat endpoint."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from agentcraft.api.schemas.conversations import MessageResponse

MAX_MESSAGE_CHARS = 10_000


class ChatRequest(BaseModel):
    """One user turn.

    Omitting ``conversation_id`` starts a new conversation titled after
    ``message``. A whitespace-only message passes schema validation and is
    rejected by the orchestrator as invalid input.
    """

    message: str = Field(..., max_length=MAX_MESSAGE_CHARS)
    conversation_id: Optional[UUID] = None


class ChatResponse(BaseModel):
    """The assistant turn that was persisted, plus where it lives."""

    conversation_id: UUID
    message: MessageResponse
    request_id: Optional[str] = None
