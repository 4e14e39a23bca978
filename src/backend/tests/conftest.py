"""
Pytest fixtures for Tally backend tests.
"""

import os
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.pop("AZURE_COSMOS_CONNECTION_STRING", None)
os.environ.pop("AZURE_COSMOS_ENDPOINT", None)
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")


class FakeWebSocket:
    """Records every JSON frame sent to it; optionally fails on send."""

    def __init__(self, fail: bool = False):
        self.sent: list[dict[str, Any]] = []
        self.fail = fail

    async def send_json(self, data: Any, mode: str = "text") -> None:
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(data)

    def events(self, name: str) -> list[Any]:
        return [frame["data"] for frame in self.sent if frame["event"] == name]


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
async def app() -> AsyncGenerator[Any, None]:
    """FastAPI application with startup/shutdown run around each test (fresh in-memory store)."""
    from main import app as fastapi_app

    async with fastapi_app.router.lifespan_context(fastapi_app):
        yield fastapi_app


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Origin": "http://localhost:3000"},
    ) as ac:
        yield ac


@pytest.fixture
def fake_websocket_factory():
    """Build FakeWebSocket instances."""
    return FakeWebSocket


@pytest.fixture
def memory_store():
    from repositories.memory_survey_repository import InMemorySurveyRepository

    return InMemorySurveyRepository()


@pytest.fixture
def mock_cosmos_session() -> AsyncMock:
    """Create mock Cosmos DB session."""
    session = AsyncMock()
    session.create_item = AsyncMock(return_value={})
    session.create_items_batch = AsyncMock(return_value=None)
    session.query_items = AsyncMock(return_value=[])
    session.read_change_feed = AsyncMock(return_value=([], None))
    session.close = AsyncMock()
    return session


@pytest.fixture
def sample_answers() -> dict[str, str]:
    """A partial questionnaire as the client sends it."""
    return {
        "1": "Often",
        "3": "Never",
        "11": "Yes",
        "23": "Student",
    }
