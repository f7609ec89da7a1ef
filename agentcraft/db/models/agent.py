"""Agent ORM model."""

import enum
from uuid import UUID

from sqlalchemy import Enum, ForeignKey, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from agentcraft.db.base import Base, TimestampMixin, UUIDMixin


class AgentStatusEnum(str, enum.Enum):
    """Lifecycle status of an agent.

    Maps to the ``agent_status`` enum type.
    """

    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"


class AgentORM(Base, UUIDMixin, TimestampMixin):
    """A user-owned agent configured from a template.

    ``system_prompt`` is rendered from the template when the agent is created
    and only changes when the agent is explicitly edited.
    Maps to the ``agent`` table.
    """

    __tablename__ = "agent"

    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    template_id: Mapped[str] = mapped_column(Text, nullable=False)
    system_prompt: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[AgentStatusEnum] = mapped_column(
        Enum(
            AgentStatusEnum,
            name="agent_status",
            native_enum=True,
            create_constraint=False,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=AgentStatusEnum.ACTIVE,
        server_default=text("'active'"),
    )
