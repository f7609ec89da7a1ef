"""Dashboard analytics endpoint."""

from fastapi import APIRouter, Depends

from agentcraft.api.dependencies import get_analytics_deriver
from agentcraft.api.schemas.analytics import AnalyticsResponse
from agentcraft.auth.dependencies import get_current_user
from agentcraft.models.auth_models import AuthContext
from agentcraft.services.analytics import AnalyticsDeriver

router = APIRouter()


@router.get("/v1/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    auth: AuthContext = Depends(get_current_user),
    deriver: AnalyticsDeriver = Depends(get_analytics_deriver),
) -> AnalyticsResponse:
    """Conversation volume, response times and recent activity for the caller."""
    analytics = await deriver.derive_analytics(auth)
    return AnalyticsResponse.model_validate(analytics.model_dump())
