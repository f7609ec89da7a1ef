"""Tests for ChatOrchestrator.send_turn against a real SQLite store."""

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from agentcraft.db.base import as_utc
from agentcraft.db.models import ConversationORM, MessageORM, MessageRoleEnum
from agentcraft.db.repositories import ConversationRepository
from agentcraft.errors import (
    CompletionError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    QuotaExceededError,
    UpstreamInvalidError,
)
from agentcraft.models.auth_models import AuthContext
from agentcraft.models.conversation_models import MessageRole
from agentcraft.services.chat_orchestrator import ChatOrchestrator, make_title
from support import FakeClock, FakeGateway, create_agent, create_user, utc


@pytest.fixture
async def owner(db_session):
    return await create_user(db_session, "owner@example.com")


@pytest.fixture
async def other_owner(db_session):
    return await create_user(db_session, "other@example.com")


@pytest.fixture
async def agent(db_session, owner):
    return await create_agent(db_session, owner.id, system_prompt="You are Support Bot.")


@pytest.fixture
def auth(owner) -> AuthContext:
    return AuthContext(user_id=owner.id, email=owner.email)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(replies=("We are open 9 to 5.", "You're welcome!", "Anything else?"))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(utc(2026, 3, 2, 9, 0, 0))


@pytest.fixture
def orchestrator(db_session, gateway, clock) -> ChatOrchestrator:
    return ChatOrchestrator(db_session, gateway, clock=clock)


async def _count(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return int(result.scalar_one())


async def _messages(session, conversation_id):
    return await ConversationRepository(session).list_messages(conversation_id)


# ---------------------------------------------------------------------------
# make_title
# ---------------------------------------------------------------------------


class TestMakeTitle:
    def test_short_message_used_verbatim(self) -> None:
        assert make_title("What are your hours?") == "What are your hours?"

    def test_exactly_fifty_characters_not_truncated(self) -> None:
        text = "x" * 50
        assert make_title(text) == text

    def test_long_message_truncated_with_ellipsis(self) -> None:
        text = "a" * 60
        assert make_title(text) == "a" * 50 + "..."


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestNewConversation:
    async def test_first_turn_creates_conversation_and_both_messages(
        self, orchestrator, db_session, agent, auth, gateway
    ) -> None:
        """A turn without a conversation id starts one and stores user + reply."""
        result = await orchestrator.send_turn(auth, agent.id, "What are your hours?")

        assert result.is_new_conversation is True
        assert result.assistant_message.role == MessageRole.ASSISTANT
        assert result.assistant_message.content == "We are open 9 to 5."
        assert result.user_message.content == "What are your hours?"

        conversation = await db_session.get(ConversationORM, result.conversation_id)
        assert conversation.title == "What are your hours?"
        assert conversation.agent_id == agent.id
        assert conversation.owner_id == auth.user_id

        messages = await _messages(db_session, result.conversation_id)
        assert [(m.role, m.content) for m in messages] == [
            (MessageRoleEnum.USER, "What are your hours?"),
            (MessageRoleEnum.ASSISTANT, "We are open 9 to 5."),
        ]

    async def test_gateway_receives_system_prompt_and_history(
        self, orchestrator, agent, auth, gateway
    ) -> None:
        await orchestrator.send_turn(auth, agent.id, "What are your hours?")

        system_prompt, history = gateway.calls[0]
        assert system_prompt == "You are Support Bot."
        assert [(m.role, m.content) for m in history] == [
            (MessageRole.USER, "What are your hours?")
        ]

    async def test_long_message_title_is_truncated(self, orchestrator, db_session, agent, auth) -> None:
        result = await orchestrator.send_turn(auth, agent.id, "b" * 80)

        conversation = await db_session.get(ConversationORM, result.conversation_id)
        assert conversation.title == "b" * 50 + "..."


class TestContinueConversation:
    async def test_second_turn_reuses_conversation(
        self, orchestrator, db_session, agent, auth, gateway
    ) -> None:
        """Continuing by id appends to the same log and sends the full history."""
        first = await orchestrator.send_turn(auth, agent.id, "What are your hours?")
        second = await orchestrator.send_turn(
            auth, agent.id, "Thanks", conversation_id=first.conversation_id
        )

        assert second.conversation_id == first.conversation_id
        assert second.is_new_conversation is False
        assert await _count(db_session, ConversationORM) == 1

        messages = await _messages(db_session, first.conversation_id)
        assert len(messages) == 4

        _, history = gateway.calls[1]
        assert [m.content for m in history] == [
            "What are your hours?",
            "We are open 9 to 5.",
            "Thanks",
        ]

    async def test_turns_alternate_in_creation_order(
        self, orchestrator, db_session, agent, auth
    ) -> None:
        first = await orchestrator.send_turn(auth, agent.id, "one")
        for text in ("two", "three"):
            await orchestrator.send_turn(auth, agent.id, text, conversation_id=first.conversation_id)

        messages = await _messages(db_session, first.conversation_id)
        assert len(messages) == 6
        assert [m.role for m in messages] == [
            MessageRoleEnum.USER,
            MessageRoleEnum.ASSISTANT,
        ] * 3
        timestamps = [as_utc(m.created_at) for m in messages]
        assert timestamps == sorted(timestamps)
        assert len(set(timestamps)) == 6

    async def test_updated_at_tracks_latest_message(
        self, orchestrator, db_session, agent, auth
    ) -> None:
        result = await orchestrator.send_turn(auth, agent.id, "hello")

        conversation = await db_session.get(ConversationORM, result.conversation_id)
        assert as_utc(conversation.updated_at) == as_utc(result.assistant_message.created_at)

    async def test_frozen_clock_still_orders_messages(self, db_session, agent, auth, gateway) -> None:
        """Timestamps stay strictly increasing even when the clock does not move."""
        frozen = FakeClock(utc(2026, 3, 2, 9, 0, 0), step=timedelta(0))
        orchestrator = ChatOrchestrator(db_session, gateway, clock=frozen)

        first = await orchestrator.send_turn(auth, agent.id, "one")
        await orchestrator.send_turn(auth, agent.id, "two", conversation_id=first.conversation_id)

        messages = await _messages(db_session, first.conversation_id)
        assert [m.content for m in messages] == ["one", "We are open 9 to 5.", "two", "You're welcome!"]
        timestamps = [as_utc(m.created_at) for m in messages]
        assert all(earlier < later for earlier, later in zip(timestamps, timestamps[1:]))


# ---------------------------------------------------------------------------
# Validation and authorization
# ---------------------------------------------------------------------------


class TestRejectedTurns:
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_empty_message_rejected(self, orchestrator, db_session, agent, auth, gateway, text) -> None:
        with pytest.raises(InvalidInputError):
            await orchestrator.send_turn(auth, agent.id, text)

        assert await _count(db_session, ConversationORM) == 0
        assert gateway.calls == []

    async def test_unknown_agent_is_not_found(self, orchestrator, db_session, auth, gateway) -> None:
        with pytest.raises(NotFoundError):
            await orchestrator.send_turn(auth, uuid4(), "hello")

        assert await _count(db_session, MessageORM) == 0
        assert gateway.calls == []

    async def test_other_owners_agent_is_forbidden(
        self, orchestrator, db_session, agent, other_owner, gateway
    ) -> None:
        intruder = AuthContext(user_id=other_owner.id, email=other_owner.email)

        with pytest.raises(ForbiddenError):
            await orchestrator.send_turn(intruder, agent.id, "hi")

        assert await _count(db_session, ConversationORM) == 0
        assert gateway.calls == []

    async def test_other_owners_conversation_is_forbidden(
        self, orchestrator, db_session, agent, auth, other_owner, gateway
    ) -> None:
        """A second owner cannot post into the first owner's conversation."""
        first = await orchestrator.send_turn(auth, agent.id, "What are your hours?")
        intruder = AuthContext(user_id=other_owner.id, email=other_owner.email)

        with pytest.raises(ForbiddenError):
            await orchestrator.send_turn(intruder, agent.id, "hi", conversation_id=first.conversation_id)

        assert len(await _messages(db_session, first.conversation_id)) == 2
        assert len(gateway.calls) == 1

    async def test_own_agent_with_foreign_conversation_is_forbidden(
        self, orchestrator, db_session, agent, other_owner
    ) -> None:
        """Owning an agent does not grant access to someone else's conversation."""
        foreign_agent = await create_agent(db_session, other_owner.id, name="Other Bot")
        foreign_auth = AuthContext(user_id=other_owner.id, email=other_owner.email)
        foreign = await orchestrator.send_turn(foreign_auth, foreign_agent.id, "hello")
        owner_auth = AuthContext(user_id=agent.owner_id, email="owner@example.com")

        with pytest.raises(ForbiddenError):
            await orchestrator.send_turn(
                owner_auth, agent.id, "hi", conversation_id=foreign.conversation_id
            )

    async def test_conversation_of_another_agent_is_forbidden(
        self, orchestrator, db_session, agent, auth
    ) -> None:
        second_agent = await create_agent(db_session, auth.user_id, name="Sales Bot")
        first = await orchestrator.send_turn(auth, agent.id, "hello")

        with pytest.raises(ForbiddenError):
            await orchestrator.send_turn(
                auth, second_agent.id, "hi", conversation_id=first.conversation_id
            )

        assert len(await _messages(db_session, first.conversation_id)) == 2

    async def test_unknown_conversation_is_forbidden(self, orchestrator, db_session, agent, auth) -> None:
        with pytest.raises(ForbiddenError):
            await orchestrator.send_turn(auth, agent.id, "hi", conversation_id=uuid4())

        assert await _count(db_session, MessageORM) == 0


# ---------------------------------------------------------------------------
# Completion failures
# ---------------------------------------------------------------------------


class TestCompletionFailures:
    @pytest.mark.parametrize(
        "error",
        [QuotaExceededError(), UpstreamInvalidError(), CompletionError()],
        ids=["quota", "upstream-invalid", "unknown"],
    )
    async def test_user_message_kept_without_reply(
        self, db_session, agent, auth, clock, error
    ) -> None:
        """A failed completion leaves the user turn stored and re-raises its kind."""
        orchestrator = ChatOrchestrator(db_session, FakeGateway(error=error), clock=clock)

        with pytest.raises(type(error)):
            await orchestrator.send_turn(auth, agent.id, "What are your hours?")

        conversations = await ConversationRepository(db_session).list_for_owner(auth.user_id)
        assert len(conversations) == 1
        messages = await _messages(db_session, conversations[0].id)
        assert [(m.role, m.content) for m in messages] == [
            (MessageRoleEnum.USER, "What are your hours?")
        ]

    async def test_unexpected_exception_becomes_completion_error(
        self, db_session, agent, auth, clock
    ) -> None:
        gateway = FakeGateway(error=RuntimeError("socket closed"))
        orchestrator = ChatOrchestrator(db_session, gateway, clock=clock)

        with pytest.raises(CompletionError):
            await orchestrator.send_turn(auth, agent.id, "hello")

        assert await _count(db_session, MessageORM) == 1

    async def test_retry_after_failure_appends_second_user_message(
        self, db_session, agent, auth, clock
    ) -> None:
        gateway = FakeGateway(replies=("Sorry for the wait.",), error=QuotaExceededError())
        orchestrator = ChatOrchestrator(db_session, gateway, clock=clock)

        with pytest.raises(QuotaExceededError):
            await orchestrator.send_turn(auth, agent.id, "hello")
        conversation = (await ConversationRepository(db_session).list_for_owner(auth.user_id))[0]

        gateway.error = None
        await orchestrator.send_turn(auth, agent.id, "hello", conversation_id=conversation.id)

        messages = await _messages(db_session, conversation.id)
        assert [m.role for m in messages] == [
            MessageRoleEnum.USER,
            MessageRoleEnum.USER,
            MessageRoleEnum.ASSISTANT,
        ]
