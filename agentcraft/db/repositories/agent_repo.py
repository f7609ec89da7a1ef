"""Agent repository."""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from agentcraft.db.models.agent import AgentORM
from agentcraft.db.models.conversation import ConversationORM, MessageORM
from agentcraft.db.repositories.base import BaseRepository, store_errors

logger = logging.getLogger(__name__)


class AgentRepository(BaseRepository[AgentORM]):
    """Owner-scoped agent queries plus cascading deletion."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AgentORM)

    @store_errors
    async def list_for_owner(self, owner_id: UUID) -> list[AgentORM]:
        """All agents of one owner, newest first."""
        stmt = (
            select(AgentORM)
            .where(AgentORM.owner_id == owner_id)
            .order_by(AgentORM.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    @store_errors
    async def delete_cascade(self, agent: AgentORM) -> None:
        """Delete an agent together with its conversations and their messages.

        Children are removed explicitly so the cascade does not depend on the
        database enforcing ``ON DELETE CASCADE``.
        """
        conversation_ids = select(ConversationORM.id).where(ConversationORM.agent_id == agent.id)
        await self._session.execute(
            delete(MessageORM).where(MessageORM.conversation_id.in_(conversation_ids))
        )
        await self._session.execute(
            delete(ConversationORM).where(ConversationORM.agent_id == agent.id)
        )
        await self._session.delete(agent)
        await self._session.flush()
        logger.info(f"agent_deleted: agent_id={agent.id}, owner_id={agent.owner_id}")
