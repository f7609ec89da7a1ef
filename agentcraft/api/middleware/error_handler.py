"""Translate exceptions escaping a route into ``ErrorResponse`` bodies."""

import logging
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from agentcraft.api.schemas.common import ErrorResponse
from agentcraft.errors import AgentCraftError, InvalidInputError

logger = logging.getLogger(__name__)


def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Build the JSON error body, tagged with the request id when one was assigned."""
    body = ErrorResponse(
        error=error,
        message=message,
        details=details,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def _from_domain_error(request: Request, exc: AgentCraftError) -> JSONResponse:
    return error_response(request, exc.status_code, exc.error, exc.message, exc.details)


async def error_handling_middleware(request: Request, call_next: Callable) -> Response:
    """
    Outermost application-level catch.

    Tagged ``AgentCraftError`` subclasses keep their own status and code. A
    bare ``ValueError`` is treated as invalid input and unique-constraint
    violations as conflicts. Anything else becomes a 500 whose message never
    carries the exception text.
    """
    path = request.url.path
    try:
        response: Response = await call_next(request)
        return response

    except AgentCraftError as e:
        log = logger.error if e.status_code >= 500 else logger.info
        log(f"domain_error: path={path}, error={e.error}, status={e.status_code}")
        return _from_domain_error(request, e)

    except ValueError as e:
        logger.warning(f"invalid_input: path={path}, error={e}")
        return _from_domain_error(request, InvalidInputError(str(e)))

    except IntegrityError as e:
        logger.warning(f"integrity_error: path={path}, error_type={type(e.orig).__name__}")
        return error_response(request, 409, "conflict", "Resource already exists")

    except Exception as e:
        logger.exception(f"unhandled_error: path={path}, error_type={type(e).__name__}")
        return error_response(request, 500, "internal_error", "An unexpected error occurred")
