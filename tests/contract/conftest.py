"""Fixtures for exercising the HTTP API against an in-memory database."""

from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.app import app
from src.services import get_async_session


@pytest.fixture
async def client(session_factory):
    """HTTP client whose requests share the test database."""

    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    app.state.dispatcher = MagicMock()
    app.state.blob_store = None
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    del app.state.dispatcher
    del app.state.blob_store
