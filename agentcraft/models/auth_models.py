"""Authenticated caller identity."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class AuthContext:
    """Identity of the authenticated caller.

    Produced by the auth dependency and passed explicitly into every
    owner-scoped service call.

    Attributes:
        user_id: UUID of the caller; the owner id for agents and conversations.
        email: Caller email, for logging and /me.
    """

    user_id: UUID
    email: str
