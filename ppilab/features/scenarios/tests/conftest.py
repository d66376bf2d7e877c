"""Test fixtures for scenarios module."""

import pytest
from httpx import ASGITransport, AsyncClient

from ppilab.core.config import Settings
from ppilab.features.pipeline.service import PipelineResult
from ppilab.features.scenarios.service import ScenarioService, ScenarioSession
from ppilab.main import app, install_pipeline_result


@pytest.fixture
def scenario_service(pipeline_result: PipelineResult, fast_settings: Settings) -> ScenarioService:
    """Service over the session's fitted models, with a pinned reference date."""
    return ScenarioService(pipeline_result.fitted, fast_settings)


@pytest.fixture
def scenario_session(scenario_service: ScenarioService) -> ScenarioSession:
    return ScenarioSession(scenario_service)


@pytest.fixture
def loaded_app(pipeline_result: PipelineResult, fast_settings: Settings):
    """Install the fitted models on the app for the duration of a test."""
    install_pipeline_result(app, pipeline_result, fast_settings)
    yield app
    install_pipeline_result(app, None, fast_settings)


@pytest.fixture
async def client():
    """Async HTTP client for the scenario endpoints.

    The lifespan is not run; tests that need models use ``loaded_app``.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
