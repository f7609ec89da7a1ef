"""Request tracing: a request id per call and one access log line."""

import logging
import re
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Inbound ids end up in logs and error bodies, so only plain tokens are kept.
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def resolve_request_id(inbound: Optional[str]) -> str:
    """Reuse the caller's id when it is a plain token, else mint a UUID4."""
    if inbound and _VALID_REQUEST_ID.match(inbound):
        return inbound
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Stores the id on ``request.state.request_id`` and echoes it back."""

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log: method, path, status, duration and request id.

    Runs inside ``RequestIdMiddleware`` so the id is already assigned.
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        started = time.monotonic()
        response: Response = await call_next(request)
        elapsed_ms = (time.monotonic() - started) * 1000.0

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"http_request: method={request.method} path={request.url.path} "
            f"status={response.status_code} duration_ms={elapsed_ms:.1f} "
            f"request_id={getattr(request.state, 'request_id', None)}"
        )
        return response
