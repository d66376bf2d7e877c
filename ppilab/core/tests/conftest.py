"""Test fixtures for core module."""

import pytest
from httpx import ASGITransport, AsyncClient

from ppilab.main import app


@pytest.fixture
async def client():
    """Create async HTTP client for testing FastAPI endpoints.

    The lifespan is not run, so no model bundle is loaded.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
