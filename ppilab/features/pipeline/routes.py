"""FastAPI routes describing the loaded models.

Endpoints:
- GET /models/summary - Evaluation metrics and winners of the current run
"""

from __future__ import annotations

from fastapi import APIRouter, Request

from ppilab.core.exceptions import ServiceUnavailableError
from ppilab.core.logging import get_logger
from ppilab.features.pipeline.schemas import BankSummaryResponse, ModelSummaryResponse
from ppilab.features.pipeline.service import PipelineResult

logger = get_logger(__name__)

router = APIRouter(prefix="/models", tags=["models"])


@router.get(
    "/summary",
    response_model=ModelSummaryResponse,
    summary="Summary of the fitted models",
)
async def models_summary(request: Request) -> ModelSummaryResponse:
    """Per-family metrics of both banks, the winners and the feature ranking.

    Args:
        request: Incoming request (used to reach application state).

    Raises:
        ServiceUnavailableError: If no fitted model bundle is loaded.
    """
    result: PipelineResult | None = getattr(request.app.state, "pipeline_result", None)
    if result is None:
        raise ServiceUnavailableError()

    return ModelSummaryResponse(
        run_id=result.run_id,
        created_at=result.created_at,
        time_series=BankSummaryResponse.from_bank(result.forecasting, result.best_time_series),
        regression=BankSummaryResponse.from_bank(result.regression, result.best_regression),
        feature_ranking=result.ranking.as_dict(),
        selected_predictors=list(result.selected_predictors),
        sensitivity_model=result.fitted.regression_model.family.value,
    )
