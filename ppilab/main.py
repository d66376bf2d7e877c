"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from ppilab.core.config import Settings, get_settings
from ppilab.core.exceptions import register_exception_handlers
from ppilab.core.health import router as health_router
from ppilab.core.logging import configure_logging, get_logger
from ppilab.core.middleware import RequestContextMiddleware
from ppilab.features.data.loader import load_dataset
from ppilab.features.pipeline.persistence import (
    bundle_path,
    load_model_bundle,
    save_model_bundle,
)
from ppilab.features.pipeline.routes import router as models_router
from ppilab.features.pipeline.service import PipelineResult, TrainingPipeline
from ppilab.features.scenarios.routes import router as scenarios_router
from ppilab.features.scenarios.service import ScenarioService, ScenarioSession

logger = get_logger(__name__)


def install_pipeline_result(app: FastAPI, result: PipelineResult | None, settings: Settings) -> None:
    """Expose a run's models to the request handlers.

    Args:
        app: FastAPI application.
        result: Pipeline result, or None to mark models as not loaded.
        settings: Application settings.
    """
    app.state.pipeline_result = result
    if result is None:
        app.state.fitted_models = None
        app.state.scenario_session = None
        return
    app.state.fitted_models = result.fitted
    app.state.scenario_session = ScenarioSession(ScenarioService(result.fitted, settings))


def bootstrap_models(settings: Settings) -> PipelineResult | None:
    """Load the persisted bundle, else train from the cleaned dataset.

    Returns:
        PipelineResult, or None when neither an artifact nor a dataset exists.
    """
    artifact = bundle_path(settings.artifacts_path)
    if artifact.exists():
        return load_model_bundle(artifact).result

    data_path = Path(settings.data_path)
    if not data_path.exists():
        logger.warning(
            "app.models_unavailable",
            artifacts_path=str(artifact),
            data_path=str(data_path),
        )
        return None

    data = load_dataset(
        data_path,
        timestamp_column=settings.data_timestamp_column,
        target_column=settings.data_target_column,
    )
    result = TrainingPipeline(settings).run(data)
    save_model_bundle(result, artifact)
    return result


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown.

    Models are fitted (or loaded) once here and reused by every request.

    Args:
        app: FastAPI application instance.

    Yields:
        None after startup, cleans up on shutdown.
    """
    settings = get_settings()

    # Startup
    configure_logging()
    logger.info(
        "app.startup_started",
        app_name=settings.app_name,
        app_env=settings.app_env,
        debug=settings.debug,
    )
    install_pipeline_result(app, bootstrap_models(settings), settings)
    logger.info("app.startup_completed", models_loaded=app.state.fitted_models is not None)

    yield

    # Shutdown
    logger.info("app.shutdown_completed")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Producer price index model evaluation and dynamic forecasting",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    install_pipeline_result(app, None, settings)

    app.add_middleware(RequestContextMiddleware)

    # Exception handlers
    register_exception_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(scenarios_router)
    app.include_router(models_router)

    return app


app = create_app()
