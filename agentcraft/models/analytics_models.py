"""Dashboard analytics result models."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class DayVolume(BaseModel):
    """Conversations started on one UTC calendar day."""

    day: str
    date: str
    conversations: int = Field(ge=0)


class HourBlockLatency(BaseModel):
    """Mean assistant response time for a 4-hour block of the day."""

    hour: str
    avg_response_time: float = Field(ge=0)


class RecentActivity(BaseModel):
    conversation_id: UUID
    agent_name: str
    title: str
    customer_preview: str
    timestamp: datetime
    status: Literal["success"] = "success"


class DashboardAnalytics(BaseModel):
    """Owner dashboard aggregate, computed on read.

    Args:
        conversation_by_day: Seven buckets, oldest to newest, today last
        response_time_by_hour_block: Six buckets, 12am through 8pm
        recent_activity: Up to ten most recently updated conversations
        total_conversations: All of the owner's conversations, any age
        avg_response_time_seconds: Mean over every counted response
    """

    conversation_by_day: list[DayVolume]
    response_time_by_hour_block: list[HourBlockLatency]
    recent_activity: list[RecentActivity]
    total_conversations: int = Field(ge=0)
    avg_response_time_seconds: float = Field(ge=0)
