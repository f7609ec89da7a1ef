"""Template catalog endpoints (public, no authentication)."""

from fastapi import APIRouter

from agentcraft.api.schemas.templates import TemplateResponse
from agentcraft.errors import NotFoundError
from agentcraft.templates import get_template, list_templates

router = APIRouter()


@router.get("/v1/templates", response_model=list[TemplateResponse])
async def list_agent_templates() -> list[TemplateResponse]:
    return [TemplateResponse.model_validate(template) for template in list_templates()]


@router.get("/v1/templates/{template_id}", response_model=TemplateResponse)
async def get_agent_template(template_id: str) -> TemplateResponse:
    template = get_template(template_id)
    if template is None:
        raise NotFoundError("Template not found")
    return TemplateResponse.model_validate(template)
