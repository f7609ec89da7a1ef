"""Dashboard analytics derived on read from stored conversations.

Every call re-reads all of the owner's conversations and messages (three
queries: conversations, agents, and one batched message fetch). Nothing is
cached or pre-aggregated, so the cost grows with the owner's history.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from agentcraft.db.base import as_utc, utcnow
from agentcraft.db.models.conversation import ConversationORM, MessageORM, MessageRoleEnum
from agentcraft.db.repositories.agent_repo import AgentRepository
from agentcraft.db.repositories.conversation_repo import ConversationRepository
from agentcraft.models.analytics_models import (
    DashboardAnalytics,
    DayVolume,
    HourBlockLatency,
    RecentActivity,
)
from agentcraft.models.auth_models import AuthContext

logger = logging.getLogger(__name__)

TRAILING_DAYS = 7
RECENT_ACTIVITY_LIMIT = 10
PREVIEW_MAX_CHARS = 50
UNKNOWN_AGENT = "Unknown Agent"
NO_MESSAGES = "No messages"

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
HOUR_BLOCK_LABELS = ("12am", "4am", "8am", "12pm", "4pm", "8pm")
HOURS_PER_BLOCK = 4


def trailing_days(today: date, days: int = TRAILING_DAYS) -> list[date]:
    """The last ``days`` calendar days ending with ``today``, oldest first."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def conversation_volume(
    conversations: Sequence[ConversationORM], today: date
) -> list[DayVolume]:
    """Count conversations created on each of the trailing seven UTC days."""
    window = trailing_days(today)
    counts = {day: 0 for day in window}
    for conversation in conversations:
        created_day = as_utc(conversation.created_at).date()
        if created_day in counts:
            counts[created_day] += 1
    return [
        DayVolume(day=WEEKDAY_LABELS[day.weekday()], date=day.isoformat(), conversations=counts[day])
        for day in window
    ]


def response_deltas(messages: Sequence[MessageORM]) -> list[tuple[datetime, float]]:
    """Response latencies of one conversation.

    Each user message immediately followed by an assistant message yields
    ``(assistant_created_at, seconds)``. Non-positive deltas are dropped.

    Args:
        messages: One conversation's messages in ascending ``created_at``.
    """
    deltas: list[tuple[datetime, float]] = []
    for previous, current in zip(messages, messages[1:]):
        if previous.role != MessageRoleEnum.USER or current.role != MessageRoleEnum.ASSISTANT:
            continue
        answered_at = as_utc(current.created_at)
        seconds = (answered_at - as_utc(previous.created_at)).total_seconds()
        if seconds > 0:
            deltas.append((answered_at, seconds))
    return deltas


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), 2)


def response_time_by_block(
    deltas: Sequence[tuple[datetime, float]],
) -> tuple[list[HourBlockLatency], float]:
    """Average latency per 4-hour block of the answer's UTC hour, plus overall."""
    blocks: list[list[float]] = [[] for _ in HOUR_BLOCK_LABELS]
    for answered_at, seconds in deltas:
        blocks[answered_at.hour // HOURS_PER_BLOCK].append(seconds)

    per_block = [
        HourBlockLatency(hour=label, avg_response_time=_mean(values))
        for label, values in zip(HOUR_BLOCK_LABELS, blocks)
    ]
    return per_block, _mean([seconds for _, seconds in deltas])


def _last_user_preview(messages: Sequence[MessageORM]) -> Optional[str]:
    for message in reversed(messages):
        if message.role == MessageRoleEnum.USER:
            return message.content[:PREVIEW_MAX_CHARS]
    return None


class AnalyticsDeriver:
    """Computes the owner dashboard from the conversation store.

    Args:
        session: Read-only use of a session.
        clock: Source of the current UTC time.
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._agents = AgentRepository(session)
        self._conversations = ConversationRepository(session)
        self._clock = clock

    async def derive_analytics(self, auth: AuthContext) -> DashboardAnalytics:
        """Build the dashboard aggregate for the caller.

        Only the caller's own conversations, agents and messages are read,
        so an owner with no data gets zeroed buckets and an empty feed.
        """
        conversations = await self._conversations.list_for_owner(auth.user_id)
        agents = await self._agents.list_for_owner(auth.user_id)
        messages_by_conversation = await self._conversations.list_messages_for_conversations(
            [conversation.id for conversation in conversations]
        )
        agent_names = {agent.id: agent.name for agent in agents}

        today = as_utc(self._clock()).date()
        by_day = conversation_volume(conversations, today)

        deltas: list[tuple[datetime, float]] = []
        for messages in messages_by_conversation.values():
            deltas.extend(response_deltas(messages))
        by_block, overall = response_time_by_block(deltas)

        # list_for_owner already orders by updated_at descending
        recent = [
            RecentActivity(
                conversation_id=conversation.id,
                agent_name=agent_names.get(conversation.agent_id, UNKNOWN_AGENT),
                title=conversation.title,
                customer_preview=_last_user_preview(messages_by_conversation[conversation.id])
                or NO_MESSAGES,
                timestamp=as_utc(conversation.updated_at),
            )
            for conversation in conversations[:RECENT_ACTIVITY_LIMIT]
        ]

        logger.info(
            f"analytics_derived: user_id={auth.user_id}, conversations={len(conversations)}, "
            f"responses={len(deltas)}"
        )
        return DashboardAnalytics(
            conversation_by_day=by_day,
            response_time_by_hour_block=by_block,
            recent_activity=recent,
            total_conversations=len(conversations),
            avg_response_time_seconds=overall,
        )
