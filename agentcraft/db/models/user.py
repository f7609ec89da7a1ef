"""User and refresh token ORM models."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from agentcraft.db.base import Base, TimestampMixin, UUIDMixin, utcnow


class UserORM(Base, UUIDMixin, TimestampMixin):
    """Account that owns agents and conversations.

    The reset columns hold one outstanding split reset token: the selector is
    stored in clear for lookup, the verifier only as a bcrypt hash. All three
    are cleared once the token is used.
    Maps to the ``user`` table.
    """

    __tablename__ = "user"

    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))

    reset_token_selector: Mapped[Optional[str]] = mapped_column(Text, nullable=True, unique=True)
    reset_token_hash: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reset_token_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class RefreshTokenORM(Base, UUIDMixin):
    """Stored refresh token for revocation support.

    Access tokens are stateless JWT (not stored). Refresh tokens
    are stored as SHA-256 hashes so they can be rotated and revoked.
    Maps to the ``refresh_token`` table.
    """

    __tablename__ = "refresh_token"

    user_id: Mapped[UUID] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    token_hash: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
