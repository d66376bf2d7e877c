"""Shared pytest fixtures for application-level tests."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from ppilab.main import create_app


@pytest.fixture
def fresh_app() -> FastAPI:
    """A newly created application with no models installed."""
    return create_app()


@pytest.fixture
async def client(fresh_app: FastAPI):
    """Create async HTTP client for testing FastAPI endpoints."""
    async with AsyncClient(
        transport=ASGITransport(app=fresh_app),
        base_url="http://test",
    ) as ac:
        yield ac
