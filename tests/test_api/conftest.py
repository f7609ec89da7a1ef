"""Shared fixtures for API endpoint tests.

Requests run against the real routers and middleware over a file-backed
SQLite store; only the completion gateway is replaced.
"""

from typing import AsyncGenerator, Generator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agentcraft.api.app import create_app
from agentcraft.api.dependencies import get_db
from agentcraft.auth.dependencies import get_current_user
from agentcraft.models.auth_models import AuthContext
from agentcraft.settings import Settings
from support import FakeGateway, create_user


class RecordingNotifier:
    """Reset notifier that keeps the links it was asked to send."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send_reset_link(self, email: str, reset_url: str) -> None:
        self.sent.append((email, reset_url))


@pytest.fixture
async def owner(db_session):
    return await create_user(db_session, "owner@example.com")


@pytest.fixture
async def other_owner(db_session):
    return await create_user(db_session, "other@example.com")


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(replies=("We are open 9 to 5.", "You're welcome!"))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def app(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    gateway: FakeGateway,
    notifier: RecordingNotifier,
) -> Generator[FastAPI, None, None]:
    """App with a per-request session on the test store.

    The lifespan does not run under ASGITransport, so the collaborators
    it would build are placed on app.state directly.
    """
    test_app = create_app(settings)
    test_app.state.completion_gateway = gateway
    test_app.state.reset_notifier = notifier

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    test_app.dependency_overrides[get_db] = override_get_db
    yield test_app
    test_app.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Client without authentication."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def auth_client(app: FastAPI, owner) -> AsyncGenerator[AsyncClient, None]:
    """Client authenticated as ``owner`` (JWT verification bypassed)."""
    app.dependency_overrides[get_current_user] = lambda: AuthContext(
        user_id=owner.id, email=owner.email
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
