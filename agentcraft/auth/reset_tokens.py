"""Split selector/verifier password-reset tokens.

The token handed to the user is ``"<selector>:<verifier>"``. The selector is
stored in clear and used for lookup; the verifier is stored only as a bcrypt
hash and checked with ``bcrypt.checkpw``. A token is valid until its expiry
and only once.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from agentcraft.auth.password import hash_secret, verify_secret
from agentcraft.db.base import as_utc
from agentcraft.db.models.user import UserORM

logger = logging.getLogger(__name__)

SELECTOR_BYTES = 16
VERIFIER_BYTES = 32
SEPARATOR = ":"


@dataclass(frozen=True)
class IssuedResetToken:
    """A freshly issued reset token and what gets stored for it."""

    token: str
    selector: str
    verifier_hash: str
    expires_at: datetime


def issue_reset_token(now: datetime, lifetime: timedelta) -> IssuedResetToken:
    selector = secrets.token_hex(SELECTOR_BYTES)
    verifier = secrets.token_hex(VERIFIER_BYTES)
    return IssuedResetToken(
        token=f"{selector}{SEPARATOR}{verifier}",
        selector=selector,
        verifier_hash=hash_secret(verifier),
        expires_at=now + lifetime,
    )


def parse_reset_token(token: str) -> Optional[tuple[str, str]]:
    """Split a presented token into (selector, verifier), or None if malformed."""
    parts = token.split(SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


def store_reset_token(user: UserORM, issued: IssuedResetToken) -> None:
    """Record an issued token on the user, replacing any earlier one."""
    user.reset_token_selector = issued.selector
    user.reset_token_hash = issued.verifier_hash
    user.reset_token_expires_at = issued.expires_at


def clear_reset_token(user: UserORM) -> None:
    user.reset_token_selector = None
    user.reset_token_hash = None
    user.reset_token_expires_at = None


def reset_token_matches(user: UserORM, verifier: str, now: datetime) -> bool:
    """Whether ``verifier`` proves possession of the user's unexpired token."""
    if not user.reset_token_hash or user.reset_token_expires_at is None:
        return False
    if as_utc(user.reset_token_expires_at) <= now:
        logger.info(f"reset_token_expired: user_id={user.id}")
        return False
    return verify_secret(verifier, user.reset_token_hash)
