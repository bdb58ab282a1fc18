"""Shared test fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.dp_relay.api.dependencies import get_relay_service
from src.main import app


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints.

    ASGITransport does not run the lifespan, so no ledger client is built.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def relay_service():
    """Replace the process-wide relay service with a mock for one test."""
    service = MagicMock()
    service.match_and_settle = AsyncMock()
    app.dependency_overrides[get_relay_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_relay_service, None)
