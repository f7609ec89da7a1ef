"""Agent CRUD endpoints, scoped to the authenticated owner."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from agentcraft.api.dependencies import get_db
from agentcraft.api.schemas.agents import AgentCreate, AgentResponse, AgentUpdate
from agentcraft.api.schemas.common import PaginatedResponse, SuccessResponse
from agentcraft.auth.dependencies import get_current_user
from agentcraft.db.models.agent import AgentORM
from agentcraft.db.repositories.agent_repo import AgentRepository
from agentcraft.errors import ForbiddenError, InvalidInputError, NotFoundError
from agentcraft.models.auth_models import AuthContext
from agentcraft.templates import get_template, render_system_prompt

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_owned_agent(repo: AgentRepository, agent_id: UUID, auth: AuthContext) -> AgentORM:
    """Load an agent, distinguishing missing (404) from not owned (403)."""
    agent = await repo.get_by_id(agent_id)
    if agent is None:
        raise NotFoundError("Agent not found")
    if agent.owner_id != auth.user_id:
        logger.warning(f"agent_access_denied: agent_id={agent_id}, user_id={auth.user_id}")
        raise ForbiddenError("Access denied")
    return agent


def _require_template(template_id: str) -> None:
    if get_template(template_id) is None:
        raise InvalidInputError("Invalid template", details={"template_id": template_id})


@router.get("/v1/agents", response_model=PaginatedResponse[AgentResponse])
async def list_agents(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[AgentResponse]:
    """
    List the caller's agents, newest first.

    Args:
        limit: Max items per page (1-100, default 20)
        offset: Number of items to skip (default 0)
        auth: Authenticated caller
        db: Async database session
    """
    agents = await AgentRepository(db).list_for_owner(auth.user_id)
    page = agents[offset : offset + limit]
    total = len(agents)

    logger.info(f"list_agents_success: user_id={auth.user_id}, total={total}, returned={len(page)}")
    return PaginatedResponse[AgentResponse].page(
        [AgentResponse.model_validate(agent) for agent in page], total, limit, offset
    )


@router.post("/v1/agents", response_model=AgentResponse, status_code=status.HTTP_201_CREATED)
async def create_agent(
    data: AgentCreate,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AgentResponse:
    """
    Create an agent from a catalog template.

    The system prompt is rendered from the template with the agent's name
    and description and stored on the agent.

    Raises:
        InvalidInputError: 400 if the template id is unknown
    """
    _require_template(data.template_id)

    repo = AgentRepository(db)
    agent = await repo.create(
        owner_id=auth.user_id,
        name=data.name,
        description=data.description,
        template_id=data.template_id,
        system_prompt=render_system_prompt(data.template_id, data.name, data.description),
        status=data.status,
    )
    await repo.commit()

    logger.info(
        f"create_agent_success: agent_id={agent.id}, user_id={auth.user_id}, "
        f"template_id={agent.template_id}"
    )
    return AgentResponse.model_validate(agent)


@router.get("/v1/agents/{agent_id}", response_model=AgentResponse)
async def get_agent(
    agent_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AgentResponse:
    agent = await get_owned_agent(AgentRepository(db), agent_id, auth)
    return AgentResponse.model_validate(agent)


@router.patch("/v1/agents/{agent_id}", response_model=AgentResponse)
async def update_agent(
    agent_id: UUID,
    data: AgentUpdate,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AgentResponse:
    """
    Partially update an agent.

    Changing the name, description or template re-renders the stored
    system prompt; a status-only change leaves it untouched.

    Raises:
        NotFoundError: 404 if the agent does not exist
        ForbiddenError: 403 if it belongs to someone else
        InvalidInputError: 400 if the new template id is unknown
    """
    repo = AgentRepository(db)
    agent = await get_owned_agent(repo, agent_id, auth)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "template_id" in changes:
        _require_template(changes["template_id"])

    if changes.keys() & {"name", "description", "template_id"}:
        changes["system_prompt"] = render_system_prompt(
            changes.get("template_id", agent.template_id),
            changes.get("name", agent.name),
            changes.get("description", agent.description),
        )

    if changes:
        agent = await repo.update(agent, **changes)
        await repo.commit()

    logger.info(
        f"update_agent_success: agent_id={agent_id}, user_id={auth.user_id}, "
        f"fields={sorted(changes)}"
    )
    return AgentResponse.model_validate(agent)


@router.delete("/v1/agents/{agent_id}", response_model=SuccessResponse)
async def delete_agent(
    agent_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    """
    Delete an agent together with all of its conversations and messages.
    """
    repo = AgentRepository(db)
    agent = await get_owned_agent(repo, agent_id, auth)
    await repo.delete_cascade(agent)
    await repo.commit()
    return SuccessResponse(message="Agent deleted", data={"agent_id": str(agent_id)})
