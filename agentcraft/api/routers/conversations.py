"""Conversation listing and message history endpoints."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from agentcraft.api.dependencies import get_db
from agentcraft.api.schemas.common import PaginatedResponse
from agentcraft.api.schemas.conversations import ConversationResponse, MessageResponse
from agentcraft.auth.dependencies import get_current_user
from agentcraft.db.repositories.conversation_repo import ConversationRepository
from agentcraft.errors import ForbiddenError, NotFoundError
from agentcraft.models.auth_models import AuthContext

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/v1/conversations", response_model=PaginatedResponse[ConversationResponse])
async def list_conversations(
    agent_id: Optional[UUID] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[ConversationResponse]:
    """
    List the caller's conversations, most recently active first.

    Args:
        agent_id: Optional filter to one agent's conversations
        limit: Max items per page (1-100, default 20)
        offset: Number of items to skip (default 0)
    """
    repo = ConversationRepository(db)
    total = await repo.count_for_owner(auth.user_id, agent_id=agent_id)
    conversations = await repo.list_for_owner(
        auth.user_id, agent_id=agent_id, limit=limit, offset=offset
    )
    return PaginatedResponse[ConversationResponse].page(
        [ConversationResponse.model_validate(c) for c in conversations], total, limit, offset
    )


@router.get("/v1/conversations/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_conversation_messages(
    conversation_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[MessageResponse]:
    """
    Full message history of one conversation in chronological order.

    Raises:
        NotFoundError: 404 if the conversation does not exist
        ForbiddenError: 403 if it belongs to someone else
    """
    repo = ConversationRepository(db)
    conversation = await repo.get_by_id(conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation not found")
    if conversation.owner_id != auth.user_id:
        logger.warning(
            f"conversation_access_denied: conversation_id={conversation_id}, user_id={auth.user_id}"
        )
        raise ForbiddenError("Access denied")

    messages = await repo.list_messages(conversation_id)
    return [MessageResponse.model_validate(m) for m in messages]
