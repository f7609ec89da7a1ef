"""Response envelopes shared by every router."""

from typing import Generic, Optional, Sequence, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorResponse(BaseModel):
    """Body of every non-2xx response this service produces itself.

    ``error`` is the machine-readable kind ("not_found", "forbidden",
    "invalid_input", "quota_exceeded", "upstream_invalid", "unknown",
    "rate_limited", ...). ``message`` is safe to show to an end user as-is.
    """

    error: str
    message: str
    details: Optional[dict] = None
    request_id: Optional[str] = None


class SuccessResponse(BaseModel):
    """Acknowledgement for operations with no resource to return."""

    message: str
    data: Optional[dict] = None


class PaginatedResponse(BaseModel, Generic[T]):
    """One offset/limit window over an owner-scoped listing."""

    items: list[T]
    total: int = Field(ge=0)
    limit: int = Field(ge=1, le=100)
    offset: int = Field(ge=0)
    has_more: bool

    @classmethod
    def page(cls, items: Sequence[T], total: int, limit: int, offset: int) -> "PaginatedResponse[T]":
        return cls(
            items=list(items),
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + limit < total,
        )


class ServiceStatus(BaseModel):
    """One dependency in a readiness report.

    ``status`` is "connected", "unavailable", "not_configured" or "error".
    """

    status: str
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    services: dict[str, ServiceStatus] = Field(default_factory=dict)
