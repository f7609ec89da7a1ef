"""Chat endpoint: one user message in, one assistant reply out."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Request

from agentcraft.api.dependencies import get_chat_orchestrator
from agentcraft.api.schemas.chat import ChatRequest, ChatResponse
from agentcraft.api.schemas.conversations import MessageResponse
from agentcraft.auth.dependencies import get_current_user
from agentcraft.models.auth_models import AuthContext
from agentcraft.services.chat_orchestrator import ChatOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/v1/agents/{agent_id}/chat", response_model=ChatResponse)
async def chat(
    agent_id: UUID,
    body: ChatRequest,
    request: Request,
    auth: AuthContext = Depends(get_current_user),
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
) -> ChatResponse:
    """
    Send a message to an agent and return its reply.

    Without ``conversation_id`` a new conversation is started. Errors are
    raised as domain errors and rendered by the error middleware:
    400 empty message or rejected prompt, 403 not owner or foreign
    conversation, 404 unknown agent, 503 completion quota, 500 other
    completion failures.
    """
    result = await orchestrator.send_turn(
        auth, agent_id, body.message, conversation_id=body.conversation_id
    )
    return ChatResponse(
        conversation_id=result.conversation_id,
        message=MessageResponse.model_validate(result.assistant_message.model_dump()),
        request_id=getattr(request.state, "request_id", None),
    )
