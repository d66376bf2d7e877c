"""Scenario recomputation: dynamic forecast, sensitivity and alerts."""

from ppilab.features.scenarios.alerts import (
    ALERT_MESSAGE,
    NO_ALERT_MESSAGE,
    AlertEvaluator,
    AlertState,
)
from ppilab.features.scenarios.schemas import RecomputeRequest, RecomputeResponse
from ppilab.features.scenarios.service import ScenarioResult, ScenarioService, ScenarioSession

__all__ = [
    "ALERT_MESSAGE",
    "NO_ALERT_MESSAGE",
    "AlertEvaluator",
    "AlertState",
    "RecomputeRequest",
    "RecomputeResponse",
    "ScenarioResult",
    "ScenarioService",
    "ScenarioSession",
]
