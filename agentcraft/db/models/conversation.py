"""Conversation threads and their append-only messages."""

import enum
from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Enum, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from agentcraft.db.base import Base, TimestampMixin, UUIDMixin, utcnow


class MessageRoleEnum(str, enum.Enum):
    """Who wrote a message; stored as the ``message_role`` enum."""

    USER = "user"
    ASSISTANT = "assistant"


class ConversationORM(Base, UUIDMixin, TimestampMixin):
    """A thread of messages between one owner and one agent.

    ``updated_at`` is bumped on every appended message and orders both the
    conversation listing and the dashboard activity feed. ``title`` is the
    first user message, truncated.
    """

    __tablename__ = "conversation"

    agent_id: Mapped[UUID] = mapped_column(
        ForeignKey("agent.id", ondelete="CASCADE"), nullable=False, index=True
    )
    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)


class MessageORM(Base, UUIDMixin):
    """One turn. Never edited, so there is no ``updated_at``.

    Within a conversation, ``created_at`` is strictly increasing and turns
    alternate user, assistant, except after a failed completion where a
    user turn is left without its reply.
    """

    __tablename__ = "message"

    conversation_id: Mapped[UUID] = mapped_column(
        ForeignKey("conversation.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[MessageRoleEnum] = mapped_column(
        Enum(
            MessageRoleEnum,
            name="message_role",
            native_enum=True,
            create_constraint=False,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
