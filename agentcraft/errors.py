"""Domain error taxonomy.

Every failure that reaches an HTTP caller is one of these kinds. The
error-handling middleware maps them onto ``ErrorResponse`` bodies using the
class-level ``error`` code and ``status_code``; the message is always safe to
show to a caller.
"""

from typing import Optional


class AgentCraftError(Exception):
    """Base class for all tagged AgentCraft failures."""

    error: str = "internal_error"
    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class NotFoundError(AgentCraftError):
    """Referenced agent or conversation does not exist."""

    error = "not_found"
    status_code = 404
    default_message = "Resource not found"


class UnauthorizedError(AgentCraftError):
    """Missing, malformed, expired or revoked credentials."""

    error = "unauthorized"
    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(AgentCraftError):
    """Resource exists but is not owned by the caller."""

    error = "forbidden"
    status_code = 403
    default_message = "Access denied"


class InvalidInputError(AgentCraftError):
    """Empty message, malformed payload or unusable token."""

    error = "invalid_input"
    status_code = 400
    default_message = "Invalid input"


class QuotaExceededError(AgentCraftError):
    """Completion provider reported a rate or quota limit."""

    error = "quota_exceeded"
    status_code = 503
    default_message = "AI service is temporarily unavailable due to quota limits. Please try again later."


class UpstreamInvalidError(AgentCraftError):
    """Completion provider rejected the prompt or its content."""

    error = "upstream_invalid"
    status_code = 400
    default_message = "Invalid request to AI service. Please check your message."


class CompletionError(AgentCraftError):
    """Any other completion failure, timeouts included."""

    error = "unknown"
    status_code = 500
    default_message = "Failed to generate AI response. Please try again."


class StoreUnavailableError(AgentCraftError):
    """Persistence layer could not be reached."""

    error = "store_unavailable"
    status_code = 503
    default_message = "Storage is temporarily unavailable. Please try again later."
