"""Dashboard analytics response schema."""

from agentcraft.models.analytics_models import DashboardAnalytics


class AnalyticsResponse(DashboardAnalytics):
    """Dashboard aggregate as served by GET /v1/analytics."""
