"""Per-subject request budgets enforced before routing."""

import hashlib
import logging
from datetime import datetime, timezone
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from agentcraft.api.middleware.error_handler import error_response
from agentcraft.auth.jwt import decode_token
from agentcraft.cache.rate_limiter import RateLimiter, RateLimitResult

logger = logging.getLogger(__name__)

# resource -> (limit, window_seconds)
RATE_LIMITS: dict[str, tuple[int, int]] = {
    "chat": (10, 60),
    "auth": (5, 15 * 60),
    "password_reset": (3, 60 * 60),
    "api": (100, 15 * 60),
}

_AUTH_PATHS = ("/v1/auth/login", "/v1/auth/register")
_PASSWORD_RESET_PATHS = ("/v1/auth/forgot-password", "/v1/auth/reset-password")
_UNLIMITED_PREFIXES = ("/health", "/ready")


def rate_limit_resource(path: str) -> Optional[str]:
    """Budget a request path counts against, or None when unlimited."""
    if path.startswith(_UNLIMITED_PREFIXES):
        return None
    if path.startswith("/v1/agents/") and path.endswith("/chat"):
        return "chat"
    if path in _PASSWORD_RESET_PATHS:
        return "password_reset"
    if path in _AUTH_PATHS:
        return "auth"
    return "api"


def _bearer_token(request: Request) -> Optional[str]:
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def _budget_headers(result: RateLimitResult, remaining: int) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset": str(int(result.reset_at.timestamp())),
    }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Counts each request against the budget of its path.

    A request with a valid bearer token is counted for its user; anything
    else for a hash of the client address, so login attempts are throttled
    per caller. With no limiter configured every request passes untouched.
    """

    def __init__(self, app, rate_limiter: Optional[RateLimiter] = None) -> None:  # type: ignore[no-untyped-def]
        super().__init__(app)
        self._rate_limiter: Optional[RateLimiter] = rate_limiter

    def _subject(self, request: Request) -> str:
        settings = getattr(request.app.state, "settings", None)
        token = _bearer_token(request)
        if settings is not None and token is not None:
            try:
                return f"user:{decode_token(token, settings).sub}"
            except ValueError:
                logger.debug("rate_limit_subject: invalid bearer token, using client address")

        client_ip = request.client.host if request.client else "unknown"
        return f"ip:{hashlib.sha256(client_ip.encode()).hexdigest()[:32]}"

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        rate_limiter = self._rate_limiter or getattr(request.app.state, "rate_limiter", None)
        resource = rate_limit_resource(request.url.path)
        if rate_limiter is None or resource is None:
            return await call_next(request)

        limit, window_seconds = RATE_LIMITS[resource]
        subject = self._subject(request)
        result = await rate_limiter.check_rate_limit(
            subject=subject, resource=resource, limit=limit, window_seconds=window_seconds
        )

        if result.allowed:
            response: Response = await call_next(request)
            response.headers.update(_budget_headers(result, result.remaining))
            return response

        now = datetime.now(timezone.utc)
        retry_after = max(0, int((result.reset_at - now).total_seconds()))
        logger.warning(
            f"rate_limit_exceeded: subject={subject}, resource={resource}, "
            f"limit={result.limit}, retry_after={retry_after}s"
        )
        headers = _budget_headers(result, 0)
        headers["Retry-After"] = str(retry_after)
        return error_response(
            request,
            429,
            "rate_limited",
            "Too many requests, please try again later.",
            details={"retry_after": retry_after},
            headers=headers,
        )
