"""HTTP middleware: error mapping, request ids, request logging, rate limits, CORS."""

from agentcraft.api.middleware.cors import configure_cors
from agentcraft.api.middleware.error_handler import error_handling_middleware
from agentcraft.api.middleware.observability import RequestIdMiddleware, RequestLoggingMiddleware
from agentcraft.api.middleware.rate_limit import RateLimitMiddleware

__all__ = [
    "RateLimitMiddleware",
    "RequestIdMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "error_handling_middleware",
]
