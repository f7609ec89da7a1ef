"""Agent CRUD schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from agentcraft.db.models.agent import AgentStatusEnum


class AgentCreate(BaseModel):
    """Create an agent from a template.

    Args:
        name: Agent display name (1-100 characters)
        description: What the agent is for; rendered into the system prompt
        template_id: Catalog template id (e.g. "website-faq")
        status: Initial status, "active" unless given
    """

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=2000)
    template_id: str = Field(..., min_length=1)
    status: AgentStatusEnum = AgentStatusEnum.ACTIVE


class AgentUpdate(BaseModel):
    """Partial agent update. Omitted fields are left unchanged."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=2000)
    template_id: Optional[str] = Field(default=None, min_length=1)
    status: Optional[AgentStatusEnum] = None


class AgentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    name: str
    description: str
    template_id: str
    system_prompt: str
    status: AgentStatusEnum
    created_at: datetime
    updated_at: datetime
