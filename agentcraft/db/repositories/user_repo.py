"""User and refresh token repository."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from agentcraft.db.models.user import RefreshTokenORM, UserORM
from agentcraft.db.repositories.base import BaseRepository, store_errors


class UserRepository(BaseRepository[UserORM]):
    """Account lookups, reset-token lookups and refresh token bookkeeping."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UserORM)

    @store_errors
    async def get_by_email(self, email: str) -> Optional[UserORM]:
        result = await self._session.execute(
            select(UserORM).where(UserORM.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    @store_errors
    async def get_by_reset_selector(self, selector: str) -> Optional[UserORM]:
        result = await self._session.execute(
            select(UserORM).where(UserORM.reset_token_selector == selector)
        )
        return result.scalar_one_or_none()

    @store_errors
    async def add_refresh_token(
        self, user_id: UUID, token_hash: str, expires_at: datetime
    ) -> RefreshTokenORM:
        token = RefreshTokenORM(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
        self._session.add(token)
        await self._session.flush()
        return token

    @store_errors
    async def get_refresh_token(self, token_hash: str) -> Optional[RefreshTokenORM]:
        result = await self._session.execute(
            select(RefreshTokenORM).where(RefreshTokenORM.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    @store_errors
    async def revoke_refresh_tokens(self, user_id: UUID, at: datetime) -> None:
        """Revoke every still-active refresh token of a user."""
        await self._session.execute(
            update(RefreshTokenORM)
            .where(RefreshTokenORM.user_id == user_id, RefreshTokenORM.revoked_at.is_(None))
            .values(revoked_at=at)
        )
        await self._session.flush()
