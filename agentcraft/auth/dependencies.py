"""FastAPI dependencies for authentication."""

import logging
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from agentcraft.api.dependencies import get_db, get_settings
from agentcraft.auth.jwt import ACCESS, decode_token
from agentcraft.db.repositories.user_repo import UserRepository
from agentcraft.errors import UnauthorizedError
from agentcraft.models.auth_models import AuthContext
from agentcraft.settings import Settings

logger = logging.getLogger(__name__)


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthContext:
    """
    Resolve the caller from a ``Bearer <access token>`` Authorization header.

    Args:
        request: Incoming request; the resolved user id is recorded on
            ``request.state`` for per-user rate limiting and logging.
        authorization: Authorization header value.
        db: Async database session.
        settings: Settings with the JWT configuration.

    Returns:
        AuthContext for the active user.

    Raises:
        UnauthorizedError: 401 if the header is missing or malformed, the token
            is invalid, expired or not an access token, or the user is
            unknown or inactive.
    """
    if not authorization:
        logger.warning("get_current_user_error: reason=missing_authorization_header")
        raise UnauthorizedError("Authorization header required")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        logger.warning("get_current_user_error: reason=malformed_authorization_header")
        raise UnauthorizedError("Malformed Authorization header")

    try:
        payload = decode_token(parts[1], settings)
    except ValueError as e:
        logger.warning(f"get_current_user_error: reason=jwt_decode_failed, error={str(e)}")
        raise UnauthorizedError(str(e)) from e

    if payload.token_type != ACCESS:
        logger.warning(f"get_current_user_error: reason=invalid_token_type, type={payload.token_type}")
        raise UnauthorizedError("Invalid token type")

    user = await UserRepository(db).get_by_id(payload.sub)
    if user is None:
        logger.warning(f"get_current_user_error: reason=user_not_found, user_id={payload.sub}")
        raise UnauthorizedError("User not found")
    if not user.is_active:
        logger.warning(f"get_current_user_error: reason=user_inactive, user_id={user.id}")
        raise UnauthorizedError("User account is inactive")

    request.state.user_id = user.id
    logger.debug(f"get_current_user_success: user_id={user.id}")
    return AuthContext(user_id=user.id, email=user.email)
