"""Chat orchestration: one user turn in, one persisted assistant reply out."""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from agentcraft.db.base import as_utc, utcnow
from agentcraft.db.models.agent import AgentORM
from agentcraft.db.models.conversation import ConversationORM, MessageRoleEnum
from agentcraft.db.repositories.agent_repo import AgentRepository
from agentcraft.db.repositories.conversation_repo import ConversationRepository
from agentcraft.errors import (
    AgentCraftError,
    CompletionError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from agentcraft.models.auth_models import AuthContext
from agentcraft.models.conversation_models import (
    ChatMessage,
    MessageRole,
    StoredMessage,
    TurnResult,
)
from agentcraft.services.completion import CompletionGateway

logger = logging.getLogger(__name__)

TITLE_MAX_CHARS = 50

# Smallest step that survives a round trip through every supported backend.
_TICK = timedelta(microseconds=1)


def make_title(message_text: str) -> str:
    """Conversation title: the first 50 characters, ellipsised if cut."""
    if len(message_text) > TITLE_MAX_CHARS:
        return message_text[:TITLE_MAX_CHARS] + "..."
    return message_text


class ChatOrchestrator:
    """Runs chat turns against the conversation store and completion gateway.

    Authorization and existence checks all happen before anything is written
    or any completion is requested. The user message is committed before the
    gateway call and is kept when the gateway fails; a retry by the caller
    therefore produces a second user message. Turns on the same conversation
    are not serialized.

    Args:
        session: Unit-of-work session; the orchestrator commits it.
        gateway: Completion gateway.
        clock: Source of the current UTC time.
    """

    def __init__(
        self,
        session: AsyncSession,
        gateway: CompletionGateway,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._agents = AgentRepository(session)
        self._conversations = ConversationRepository(session)
        self._gateway = gateway
        self._clock = clock

    def _timestamp_after(self, previous: Optional[datetime]) -> datetime:
        """Current time, nudged forward so it is strictly after ``previous``."""
        now = as_utc(self._clock())
        previous = as_utc(previous)
        if previous is not None and now <= previous:
            return previous + _TICK
        return now

    async def _authorize_agent(self, auth: AuthContext, agent_id: UUID) -> AgentORM:
        agent = await self._agents.get_by_id(agent_id)
        if agent is None:
            logger.info(f"chat_agent_not_found: agent_id={agent_id}, user_id={auth.user_id}")
            raise NotFoundError("Agent not found")
        if agent.owner_id != auth.user_id:
            logger.warning(f"chat_agent_forbidden: agent_id={agent_id}, user_id={auth.user_id}")
            raise ForbiddenError("Access denied")
        return agent

    async def _authorize_conversation(
        self, auth: AuthContext, agent: AgentORM, conversation_id: UUID
    ) -> ConversationORM:
        conversation = await self._conversations.get_by_id(conversation_id)
        if (
            conversation is None
            or conversation.owner_id != auth.user_id
            or conversation.agent_id != agent.id
        ):
            logger.warning(
                f"chat_conversation_forbidden: conversation_id={conversation_id}, "
                f"agent_id={agent.id}, user_id={auth.user_id}"
            )
            raise ForbiddenError("Invalid conversation")
        return conversation

    async def send_turn(
        self,
        auth: AuthContext,
        agent_id: UUID,
        message_text: str,
        conversation_id: Optional[UUID] = None,
    ) -> TurnResult:
        """Append one user message, request a reply, append the reply.

        Args:
            auth: Authenticated caller; must own the agent and conversation.
            agent_id: Agent addressed by the message.
            message_text: Non-empty user message.
            conversation_id: Existing conversation of this agent to continue,
                or None to start a new one titled after the message.

        Returns:
            TurnResult with both persisted messages.

        Raises:
            InvalidInputError: Empty or whitespace-only message.
            NotFoundError: Agent does not exist.
            ForbiddenError: Agent or conversation not owned by the caller, or
                the conversation belongs to another agent.
            QuotaExceededError, UpstreamInvalidError, CompletionError:
                Completion failed; the user message stays persisted.
        """
        # ---- Step 1: validate and authorize before any write ----
        if not message_text or not message_text.strip():
            raise InvalidInputError("Message cannot be empty")

        agent = await self._authorize_agent(auth, agent_id)

        # ---- Step 2: resolve or lazily create the conversation ----
        is_new = conversation_id is None
        if conversation_id is not None:
            conversation = await self._authorize_conversation(auth, agent, conversation_id)
        else:
            now = as_utc(self._clock())
            conversation = await self._conversations.create(
                agent_id=agent.id,
                owner_id=auth.user_id,
                title=make_title(message_text),
                created_at=now,
                updated_at=now,
            )
            logger.info(
                f"conversation_created: conversation_id={conversation.id}, agent_id={agent.id}"
            )

        # ---- Step 3: persist the user turn ----
        user_message = await self._conversations.append_message(
            conversation,
            MessageRoleEnum.USER,
            message_text,
            at=self._timestamp_after(conversation.updated_at),
        )
        await self._conversations.commit()

        # ---- Step 4: assemble history, newest user message included ----
        stored = await self._conversations.list_messages(conversation.id)
        history = [ChatMessage(role=MessageRole(m.role.value), content=m.content) for m in stored]

        # ---- Step 5: request the completion ----
        try:
            reply = await self._gateway.complete(agent.system_prompt, history)
        except AgentCraftError as e:
            logger.warning(
                f"chat_turn_failed: conversation_id={conversation.id}, kind={e.error}, "
                f"user_message_id={user_message.id}"
            )
            raise
        except Exception as e:
            logger.exception(
                f"chat_turn_failed: conversation_id={conversation.id}, kind=unknown, "
                f"user_message_id={user_message.id}"
            )
            raise CompletionError() from e

        # ---- Step 6: persist the assistant turn ----
        assistant_message = await self._conversations.append_message(
            conversation,
            MessageRoleEnum.ASSISTANT,
            reply,
            at=self._timestamp_after(user_message.created_at),
        )
        await self._conversations.commit()

        logger.info(
            f"chat_turn_complete: conversation_id={conversation.id}, agent_id={agent.id}, "
            f"new_conversation={is_new}, history={len(history)}"
        )
        return TurnResult(
            conversation_id=conversation.id,
            user_message=StoredMessage.model_validate(user_message),
            assistant_message=StoredMessage.model_validate(assistant_message),
            is_new_conversation=is_new,
        )
