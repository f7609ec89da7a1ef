"""Browser access for the dashboard front-end."""

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

if TYPE_CHECKING:
    from agentcraft.settings import Settings

logger = logging.getLogger(__name__)

# Headers the dashboard reads from responses.
EXPOSED_HEADERS = [
    "X-Request-ID",
    "X-RateLimit-Limit",
    "X-RateLimit-Remaining",
    "X-RateLimit-Reset",
    "Retry-After",
]


def allowed_origins(settings: "Settings") -> list[str]:
    """Configured origins minus "*", which browsers refuse alongside credentials."""
    origins = [origin for origin in settings.cors_origins if origin != "*"]
    if len(origins) != len(settings.cors_origins):
        logger.warning("cors_wildcard_removed: wildcard origin incompatible with credentials")
    return origins


def configure_cors(app: FastAPI, settings: "Settings") -> None:
    origins = allowed_origins(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=EXPOSED_HEADERS,
    )
    logger.info(f"cors_configured: origins={origins}")
