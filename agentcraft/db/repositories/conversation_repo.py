"""Conversation store: conversations and their append-only message logs."""

import logging
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from agentcraft.db.models.conversation import ConversationORM, MessageORM, MessageRoleEnum
from agentcraft.db.repositories.base import BaseRepository, store_errors

logger = logging.getLogger(__name__)


class ConversationRepository(BaseRepository[ConversationORM]):
    """Repository for conversations and messages.

    Messages are only ever inserted. Appending a message is two sequential
    writes (insert, then bump ``conversation.updated_at``); a brief lag of
    ``updated_at`` behind the newest message is tolerated.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ConversationORM)

    def _owner_filters(self, owner_id: UUID, agent_id: Optional[UUID]) -> list:
        filters = [ConversationORM.owner_id == owner_id]
        if agent_id is not None:
            filters.append(ConversationORM.agent_id == agent_id)
        return filters

    @store_errors
    async def list_for_owner(
        self,
        owner_id: UUID,
        agent_id: Optional[UUID] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[ConversationORM]:
        """Owner's conversations, most recently updated first.

        Args:
            owner_id: Owning user.
            agent_id: Optional filter to a single agent.
            limit: Max rows; None returns all.
            offset: Rows to skip.
        """
        stmt = (
            select(ConversationORM)
            .where(*self._owner_filters(owner_id, agent_id))
            .order_by(ConversationORM.updated_at.desc(), ConversationORM.id)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    @store_errors
    async def count_for_owner(self, owner_id: UUID, agent_id: Optional[UUID] = None) -> int:
        stmt = (
            select(func.count())
            .select_from(ConversationORM)
            .where(*self._owner_filters(owner_id, agent_id))
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    @store_errors
    async def append_message(
        self,
        conversation: ConversationORM,
        role: MessageRoleEnum,
        content: str,
        at: datetime,
    ) -> MessageORM:
        """Append one message and touch the conversation.

        Args:
            conversation: Conversation loaded through this session.
            role: Sender role.
            content: Message text.
            at: Timestamp for the message and the new ``updated_at``.

        Returns:
            The persisted message.
        """
        message = MessageORM(
            conversation_id=conversation.id, role=role, content=content, created_at=at
        )
        self._session.add(message)
        await self._session.flush()

        conversation.updated_at = at
        await self._session.flush()
        logger.debug(
            f"message_appended: conversation_id={conversation.id}, role={role.value}, "
            f"message_id={message.id}"
        )
        return message

    @store_errors
    async def list_messages(self, conversation_id: UUID) -> list[MessageORM]:
        """Full message log of one conversation in insertion order."""
        stmt = (
            select(MessageORM)
            .where(MessageORM.conversation_id == conversation_id)
            .order_by(MessageORM.created_at.asc(), MessageORM.id)
        )
        result = await self._session.execute(stmt)
        messages = list(result.scalars().all())
        return messages

    @store_errors
    async def list_messages_for_conversations(
        self, conversation_ids: Iterable[UUID]
    ) -> dict[UUID, list[MessageORM]]:
        """Messages of many conversations in a single round trip.

        Returns:
            Mapping of conversation id to its messages in ascending
            ``created_at`` order. Conversations without messages map to [].
        """
        ids = list(conversation_ids)
        grouped: dict[UUID, list[MessageORM]] = {conversation_id: [] for conversation_id in ids}
        if not ids:
            return grouped

        stmt = (
            select(MessageORM)
            .where(MessageORM.conversation_id.in_(ids))
            .order_by(MessageORM.conversation_id, MessageORM.created_at.asc())
        )
        result = await self._session.execute(stmt)
        for message in result.scalars().all():
            grouped[message.conversation_id].append(message)
        return grouped
