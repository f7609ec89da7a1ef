"""Test doubles and seed helpers shared across the suite."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from agentcraft.db.models import (
    AgentORM,
    ConversationORM,
    MessageORM,
    MessageRoleEnum,
    UserORM,
)
from agentcraft.models.conversation_models import ChatMessage

JWT_SECRET = "test-secret-key-for-jwt-testing-only"


class FakeGateway:
    """Completion gateway double that records every call.

    Replies are returned in order (the last one repeats); ``error`` is
    raised instead when set.
    """

    def __init__(
        self, replies: Sequence[str] = ("Happy to help!",), error: Optional[Exception] = None
    ) -> None:
        self.replies = list(replies)
        self.error = error
        self.calls: list[tuple[str, list[ChatMessage]]] = []

    async def complete(self, system_prompt: str, messages: Sequence[ChatMessage]) -> str:
        self.calls.append((system_prompt, list(messages)))
        if self.error is not None:
            raise self.error
        index = min(len(self.calls), len(self.replies)) - 1
        return self.replies[index]


class FakeClock:
    """Deterministic clock advancing by ``step`` on every reading."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


async def create_user(
    session: AsyncSession, email: str = "owner@example.com", password_hash: str = "unused"
) -> UserORM:
    user = UserORM(email=email, password_hash=password_hash, is_active=True)
    session.add(user)
    await session.commit()
    return user


async def create_agent(
    session: AsyncSession,
    owner_id: UUID,
    name: str = "Support Bot",
    template_id: str = "website-faq",
    system_prompt: str = "You are Support Bot.",
) -> AgentORM:
    agent = AgentORM(
        owner_id=owner_id,
        name=name,
        description="Answers questions",
        template_id=template_id,
        system_prompt=system_prompt,
    )
    session.add(agent)
    await session.commit()
    return agent


async def create_conversation(
    session: AsyncSession,
    agent_id: UUID,
    owner_id: UUID,
    created_at: datetime,
    updated_at: Optional[datetime] = None,
    title: str = "Hello",
) -> ConversationORM:
    conversation = ConversationORM(
        agent_id=agent_id,
        owner_id=owner_id,
        title=title,
        created_at=created_at,
        updated_at=updated_at or created_at,
    )
    session.add(conversation)
    await session.commit()
    return conversation


async def add_message(
    session: AsyncSession,
    conversation_id: UUID,
    role: MessageRoleEnum,
    content: str,
    created_at: datetime,
) -> MessageORM:
    message = MessageORM(
        conversation_id=conversation_id, role=role, content=content, created_at=created_at
    )
    session.add(message)
    await session.commit()
    return message
