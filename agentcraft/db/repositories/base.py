"""Shared repository plumbing: error tagging and the generic CRUD trio."""

import functools
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from agentcraft.db.base import Base
from agentcraft.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Base)
F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def store_errors(func: F) -> F:
    """Re-tag connection-level database failures as StoreUnavailableError.

    Constraint violations and programming errors pass through untouched.
    Nothing is retried here.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            logger.error(f"store_unavailable: operation={func.__qualname__}, error={type(e).__name__}")
            raise StoreUnavailableError() from e

    return wrapper  # type: ignore[return-value]


class BaseRepository(Generic[T]):
    """get_by_id, create and update over one ORM class.

    Writes are flushed, never committed; a router or service that owns the
    unit of work calls ``commit()`` once it is complete.
    """

    def __init__(self, session: AsyncSession, model_class: Type[T]) -> None:
        self._session = session
        self._model_class = model_class

    @store_errors
    async def get_by_id(self, id: UUID) -> Optional[T]:
        return await self._session.get(self._model_class, id)

    @store_errors
    async def create(self, **kwargs: object) -> T:
        """Insert a row and return it with server defaults loaded."""
        instance = self._model_class(**kwargs)
        self._session.add(instance)
        await self._session.flush()
        await self._session.refresh(instance)
        return instance

    @store_errors
    async def update(self, instance: T, **kwargs: object) -> T:
        for key, value in kwargs.items():
            setattr(instance, key, value)
        await self._session.flush()
        await self._session.refresh(instance)
        return instance

    @store_errors
    async def commit(self) -> None:
        await self._session.commit()
