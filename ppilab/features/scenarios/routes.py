"""FastAPI routes for scenario recomputation.

Endpoints:
- POST /scenarios/recompute - Forecast, sensitivity and alert for new parameters
- GET /scenarios/latest - Last successfully computed result
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from ppilab.core.exceptions import NotFoundError, ServiceUnavailableError
from ppilab.core.logging import get_logger
from ppilab.features.scenarios.schemas import RecomputeRequest, RecomputeResponse
from ppilab.features.scenarios.service import ScenarioSession

logger = get_logger(__name__)

router = APIRouter(prefix="/scenarios", tags=["scenarios"])


def get_scenario_session(request: Request) -> ScenarioSession:
    """Scenario session of the running application.

    Raises:
        ServiceUnavailableError: If no fitted model bundle is loaded.
    """
    session: ScenarioSession | None = getattr(request.app.state, "scenario_session", None)
    if session is None:
        raise ServiceUnavailableError()
    return session


@router.post(
    "/recompute",
    response_model=RecomputeResponse,
    status_code=status.HTTP_200_OK,
    summary="Recompute a scenario",
    description="""
Regenerate the forecast, the sensitivity analysis and the alert for new
parameters, reusing the models fitted at startup (nothing is refitted).

**Horizon:** months from the reference date to the target month; a target
that is not in the future is rejected with 422.

**Sensitivity:** the predictor column of the regression test partition is
scaled by (1 + adjustment_pct / 100) and re-scored.

**Alert:** triggered when any forecast point exceeds the threshold.

Requests are processed one at a time. A failed request leaves the last
successful result in place.
""",
)
def recompute_scenario(
    params: RecomputeRequest,
    session: ScenarioSession = Depends(get_scenario_session),
) -> RecomputeResponse:
    """Recompute a scenario.

    Args:
        params: Recomputation parameters.
        session: Scenario session from dependency.

    Returns:
        RecomputeResponse for the new parameters.
    """
    logger.info(
        "scenarios.request_received",
        target_year=params.target_year,
        target_month=params.target_month,
        adjustment_pct=params.adjustment_pct,
        history_points=params.history_points,
        threshold=params.threshold,
    )
    return session.submit(params).to_response()


@router.get(
    "/latest",
    response_model=RecomputeResponse,
    summary="Last scenario result",
)
def latest_scenario(
    session: ScenarioSession = Depends(get_scenario_session),
) -> RecomputeResponse:
    """Last successfully computed scenario.

    Raises:
        NotFoundError: If nothing has been computed yet.
    """
    last = session.last
    if last is None:
        raise NotFoundError("No scenario has been computed yet")
    return last.to_response()
