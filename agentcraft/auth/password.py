"""bcrypt hashing for account passwords and reset-token verifiers."""

import logging
import re

import bcrypt

logger = logging.getLogger(__name__)

MIN_LENGTH = 8
# bcrypt only looks at the first 72 bytes and refuses longer input.
MAX_BYTES = 72
ROUNDS = 12

# (pattern, message) pairs every account password must satisfy.
_POLICY: tuple[tuple[str, str], ...] = (
    (r"[A-Z]", "Password must contain at least one uppercase letter"),
    (r"[a-z]", "Password must contain at least one lowercase letter"),
    (r"[0-9]", "Password must contain at least one digit"),
)


def validate_password_strength(password: str) -> list[str]:
    """Every policy violation of ``password``; an empty list means acceptable."""
    problems = []
    if len(password) < MIN_LENGTH:
        problems.append(f"Password must be at least {MIN_LENGTH} characters long")
    if len(password.encode("utf-8")) > MAX_BYTES:
        problems.append(f"Password must be at most {MAX_BYTES} bytes long")
    problems.extend(message for pattern, message in _POLICY if not re.search(pattern, password))
    return problems


def hash_secret(secret: str) -> str:
    """Hash without any policy check. Used for reset-token verifiers."""
    digest = bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=ROUNDS))
    return digest.decode("utf-8")


def verify_secret(secret: str, hashed: str) -> bool:
    """Constant-time comparison; a malformed stored hash counts as a mismatch.

    Input bcrypt cannot have hashed (over ``MAX_BYTES``) never matches.
    """
    if len(secret.encode("utf-8")) > MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(secret.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        logger.warning("verify_secret: stored hash is not a bcrypt hash")
        return False


def hash_password(plain_password: str) -> str:
    """
    Hash an account password after enforcing the strength policy.

    Raises:
        ValueError: Listing every violated rule, separated by "; ".
    """
    problems = validate_password_strength(plain_password)
    if problems:
        raise ValueError("; ".join(problems))
    return hash_secret(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return verify_secret(plain_password, hashed_password)
