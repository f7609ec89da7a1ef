"""Tests for the dashboard analytics derivation."""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from agentcraft.db.models import MessageORM, MessageRoleEnum
from agentcraft.models.auth_models import AuthContext
from agentcraft.services.analytics import (
    HOUR_BLOCK_LABELS,
    NO_MESSAGES,
    UNKNOWN_AGENT,
    AnalyticsDeriver,
    response_deltas,
    response_time_by_block,
    trailing_days,
)
from support import add_message, create_agent, create_conversation, create_user, utc

# Thursday
NOW = utc(2026, 1, 15, 10, 0, 0)


@pytest.fixture
async def owner(db_session):
    return await create_user(db_session, "owner@example.com")


@pytest.fixture
async def agent(db_session, owner):
    return await create_agent(db_session, owner.id, name="Support Bot")


@pytest.fixture
def auth(owner) -> AuthContext:
    return AuthContext(user_id=owner.id, email=owner.email)


@pytest.fixture
def deriver(db_session) -> AnalyticsDeriver:
    return AnalyticsDeriver(db_session, clock=lambda: NOW)


def _message(role: MessageRoleEnum, at) -> MessageORM:
    return MessageORM(conversation_id=uuid4(), role=role, content="x", created_at=at)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


class TestTrailingDays:
    def test_seven_days_oldest_first_ending_today(self) -> None:
        days = trailing_days(date(2026, 1, 15))

        assert len(days) == 7
        assert days[0] == date(2026, 1, 9)
        assert days[-1] == date(2026, 1, 15)


class TestResponseDeltas:
    def test_adjacent_user_assistant_pairs_counted(self) -> None:
        messages = [
            _message(MessageRoleEnum.USER, utc(2026, 1, 15, 9, 0, 0)),
            _message(MessageRoleEnum.ASSISTANT, utc(2026, 1, 15, 9, 0, 2)),
            _message(MessageRoleEnum.USER, utc(2026, 1, 15, 9, 1, 0)),
            _message(MessageRoleEnum.ASSISTANT, utc(2026, 1, 15, 9, 1, 5)),
        ]

        assert [seconds for _, seconds in response_deltas(messages)] == [2.0, 5.0]

    def test_unanswered_user_message_skipped(self) -> None:
        """Two user messages in a row: only the second one is paired."""
        messages = [
            _message(MessageRoleEnum.USER, utc(2026, 1, 15, 9, 0, 0)),
            _message(MessageRoleEnum.USER, utc(2026, 1, 15, 9, 0, 10)),
            _message(MessageRoleEnum.ASSISTANT, utc(2026, 1, 15, 9, 0, 13)),
        ]

        assert [seconds for _, seconds in response_deltas(messages)] == [3.0]

    def test_assistant_before_user_never_counted(self) -> None:
        messages = [
            _message(MessageRoleEnum.ASSISTANT, utc(2026, 1, 15, 9, 0, 0)),
            _message(MessageRoleEnum.USER, utc(2026, 1, 15, 9, 0, 4)),
        ]

        assert response_deltas(messages) == []

    def test_non_positive_delta_excluded(self) -> None:
        messages = [
            _message(MessageRoleEnum.USER, utc(2026, 1, 15, 9, 0, 5)),
            _message(MessageRoleEnum.ASSISTANT, utc(2026, 1, 15, 9, 0, 5)),
            _message(MessageRoleEnum.USER, utc(2026, 1, 15, 9, 0, 9)),
            _message(MessageRoleEnum.ASSISTANT, utc(2026, 1, 15, 9, 0, 6)),
        ]

        assert response_deltas(messages) == []


class TestResponseTimeByBlock:
    def test_empty_input_gives_zeroed_blocks(self) -> None:
        blocks, overall = response_time_by_block([])

        assert [b.hour for b in blocks] == list(HOUR_BLOCK_LABELS)
        assert all(b.avg_response_time == 0.0 for b in blocks)
        assert overall == 0.0

    def test_bucketed_by_answer_hour_and_rounded(self) -> None:
        deltas = [
            (utc(2026, 1, 15, 3, 59, 59), 1.0),
            (utc(2026, 1, 15, 4, 0, 0), 2.0),
            (utc(2026, 1, 15, 23, 0, 0), 1.0),
            (utc(2026, 1, 15, 22, 0, 0), 2.0),
            (utc(2026, 1, 15, 21, 0, 0), 2.0),
        ]

        blocks, overall = response_time_by_block(deltas)
        by_label = {b.hour: b.avg_response_time for b in blocks}

        assert by_label["12am"] == 1.0
        assert by_label["4am"] == 2.0
        assert by_label["8pm"] == 1.67
        assert by_label["12pm"] == 0.0
        assert overall == 1.6


# ---------------------------------------------------------------------------
# derive_analytics
# ---------------------------------------------------------------------------


class TestDeriveAnalytics:
    async def test_owner_without_data_gets_zeroed_dashboard(self, deriver, auth) -> None:
        result = await deriver.derive_analytics(auth)

        assert result.total_conversations == 0
        assert result.recent_activity == []
        assert result.avg_response_time_seconds == 0.0
        assert [d.day for d in result.conversation_by_day] == [
            "Fri", "Sat", "Sun", "Mon", "Tue", "Wed", "Thu",
        ]
        assert all(d.conversations == 0 for d in result.conversation_by_day)
        assert len(result.response_time_by_hour_block) == 6

    async def test_old_conversations_count_in_total_only(self, db_session, deriver, agent, auth) -> None:
        """Two conversations today and one eight days ago."""
        await create_conversation(db_session, agent.id, auth.user_id, NOW - timedelta(hours=2))
        await create_conversation(db_session, agent.id, auth.user_id, NOW - timedelta(hours=1))
        await create_conversation(db_session, agent.id, auth.user_id, NOW - timedelta(days=8))

        result = await deriver.derive_analytics(auth)

        assert result.total_conversations == 3
        assert sum(d.conversations for d in result.conversation_by_day) == 2
        today = result.conversation_by_day[-1]
        assert today.date == "2026-01-15"
        assert today.conversations == 2

    async def test_window_edges(self, db_session, deriver, agent, auth) -> None:
        await create_conversation(db_session, agent.id, auth.user_id, utc(2026, 1, 9, 0, 0, 0))
        await create_conversation(db_session, agent.id, auth.user_id, utc(2026, 1, 8, 23, 59, 59))

        result = await deriver.derive_analytics(auth)

        assert result.conversation_by_day[0].date == "2026-01-09"
        assert result.conversation_by_day[0].conversations == 1
        assert sum(d.conversations for d in result.conversation_by_day) == 1

    async def test_response_times(self, db_session, deriver, agent, auth) -> None:
        morning = await create_conversation(db_session, agent.id, auth.user_id, utc(2026, 1, 15, 9))
        await add_message(db_session, morning.id, MessageRoleEnum.USER, "hi", utc(2026, 1, 15, 9, 0, 0))
        await add_message(db_session, morning.id, MessageRoleEnum.ASSISTANT, "hello", utc(2026, 1, 15, 9, 0, 2))

        afternoon = await create_conversation(db_session, agent.id, auth.user_id, utc(2026, 1, 14, 13))
        await add_message(db_session, afternoon.id, MessageRoleEnum.USER, "hi", utc(2026, 1, 14, 13, 0, 0))
        await add_message(db_session, afternoon.id, MessageRoleEnum.ASSISTANT, "hello", utc(2026, 1, 14, 13, 0, 4))

        result = await deriver.derive_analytics(auth)
        by_label = {b.hour: b.avg_response_time for b in result.response_time_by_hour_block}

        assert by_label["8am"] == 2.0
        assert by_label["12pm"] == 4.0
        assert result.avg_response_time_seconds == 3.0
        assert all(value >= 0 for value in by_label.values())

    async def test_recent_activity_feed(self, db_session, deriver, agent, auth) -> None:
        """Newest ten by update time, with preview of the last user message."""
        conversations = []
        for i in range(12):
            conversations.append(
                await create_conversation(
                    db_session,
                    agent.id,
                    auth.user_id,
                    utc(2026, 1, 14, 8),
                    updated_at=utc(2026, 1, 14, 8, i),
                    title=f"Conversation {i}",
                )
            )
        newest = conversations[-1]
        await add_message(db_session, newest.id, MessageRoleEnum.USER, "first question", utc(2026, 1, 14, 8, 10))
        await add_message(db_session, newest.id, MessageRoleEnum.USER, "q" * 70, utc(2026, 1, 14, 8, 10, 1))
        await add_message(db_session, newest.id, MessageRoleEnum.ASSISTANT, "answer", utc(2026, 1, 14, 8, 10, 3))

        result = await deriver.derive_analytics(auth)

        assert len(result.recent_activity) == 10
        assert [a.title for a in result.recent_activity][:2] == ["Conversation 11", "Conversation 10"]
        top = result.recent_activity[0]
        assert top.agent_name == "Support Bot"
        assert top.customer_preview == "q" * 50
        assert top.status == "success"
        assert top.timestamp == utc(2026, 1, 14, 8, 11)
        assert result.recent_activity[1].customer_preview == NO_MESSAGES

    async def test_deleted_agent_shown_as_unknown(self, db_session, deriver, auth) -> None:
        await create_conversation(db_session, uuid4(), auth.user_id, utc(2026, 1, 15, 8))

        result = await deriver.derive_analytics(auth)

        assert result.recent_activity[0].agent_name == UNKNOWN_AGENT

    async def test_other_owners_data_excluded(self, db_session, deriver, agent, auth) -> None:
        stranger = await create_user(db_session, "stranger@example.com")
        stranger_agent = await create_agent(db_session, stranger.id, name="Other Bot")
        other = await create_conversation(db_session, stranger_agent.id, stranger.id, NOW)
        await add_message(db_session, other.id, MessageRoleEnum.USER, "hi", NOW)
        await add_message(db_session, other.id, MessageRoleEnum.ASSISTANT, "yo", NOW + timedelta(seconds=9))

        result = await deriver.derive_analytics(auth)

        assert result.total_conversations == 0
        assert result.recent_activity == []
        assert result.avg_response_time_seconds == 0.0
