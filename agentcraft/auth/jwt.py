"""JWT access and refresh token management."""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID, uuid4

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from agentcraft.settings import Settings

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPayload:
    """Decoded JWT token payload."""

    sub: UUID
    exp: datetime
    token_type: str
    jti: Optional[str] = None


def _secret(settings: Settings) -> str:
    if not settings.jwt_secret_key:
        raise ValueError("jwt_secret_key must be configured in settings")
    return settings.jwt_secret_key


def hash_refresh_token(token: str) -> str:
    """SHA-256 digest under which a refresh token is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_access_token(user_id: UUID, settings: Settings, now: Optional[datetime] = None) -> str:
    """
    Create a short-lived JWT access token.

    Args:
        user_id: User UUID to encode in token
        settings: Settings carrying the signing key and expiry
        now: Issue time (defaults to current UTC time)

    Returns:
        Signed JWT access token string

    Raises:
        ValueError: If jwt_secret_key is not configured
    """
    secret = _secret(settings)
    now = now or datetime.now(timezone.utc)
    exp = now + timedelta(minutes=settings.jwt_access_token_expire_minutes)

    payload = {"sub": str(user_id), "exp": exp, "type": ACCESS}
    token: str = jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)
    logger.info(f"access_token_created: user_id={user_id}, exp={exp.isoformat()}")
    return token


def create_refresh_token(
    user_id: UUID, settings: Settings, now: Optional[datetime] = None
) -> tuple[str, datetime]:
    """
    Create a JWT refresh token.

    Each token carries a random ``jti`` so two tokens issued in the same
    second still hash differently.

    Returns:
        Tuple of (token, expires_at)

    Raises:
        ValueError: If jwt_secret_key is not configured
    """
    secret = _secret(settings)
    now = now or datetime.now(timezone.utc)
    exp = now + timedelta(days=settings.jwt_refresh_token_expire_days)

    payload = {"sub": str(user_id), "exp": exp, "type": REFRESH, "jti": uuid4().hex}
    token: str = jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)
    logger.info(f"refresh_token_created: user_id={user_id}, exp={exp.isoformat()}")
    return token, exp


def decode_token(token: str, settings: Settings) -> TokenPayload:
    """
    Decode and validate a JWT token.

    Raises:
        ValueError: If token is expired, invalid, or malformed
    """
    secret = _secret(settings)

    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
        decoded = TokenPayload(
            sub=UUID(payload["sub"]),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            token_type=payload["type"],
            jti=payload.get("jti"),
        )
    except ExpiredSignatureError as e:
        logger.warning("token_expired")
        raise ValueError("Token has expired") from e
    except JWTError as e:
        logger.warning(f"token_invalid: error={str(e)}")
        raise ValueError("Invalid token") from e
    except (KeyError, ValueError, TypeError) as e:
        logger.warning(f"token_parse_error: error={type(e).__name__}")
        raise ValueError("Invalid token") from e

    logger.debug(f"token_decoded: user_id={decoded.sub}, type={decoded.token_type}")
    return decoded
