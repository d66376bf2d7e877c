"""Scenario recomputation over the run's already fitted models.

``ScenarioService.recompute`` is a plain request/response function:
parameters in, {forecast, sensitivity, alert} out. ``ScenarioSession`` adds
the interactive contract on top: one recomputation at a time, and the last
successful result is replaced only by another successful one.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import UTC, date, datetime

import structlog

from ppilab.core.config import Settings, get_settings
from ppilab.core.exceptions import PPILabError
from ppilab.core.logging import log_duration
from ppilab.features.forecasting.engine import DynamicForecast, DynamicForecastEngine
from ppilab.features.pipeline.service import FittedModels
from ppilab.features.regression.sensitivity import SensitivityAnalyzer, SensitivityResult
from ppilab.features.scenarios.alerts import AlertEvaluator, AlertState
from ppilab.features.scenarios.schemas import (
    AlertResponse,
    ForecastPointResponse,
    RecomputeRequest,
    RecomputeResponse,
    SensitivityPointResponse,
    SensitivityResponse,
    WindowPointResponse,
)

logger = structlog.get_logger()


@dataclass(frozen=True, eq=False)
class ScenarioResult:
    """Outcome of one successful recomputation.

    Attributes:
        params: Parameters the result was computed for.
        reference_date: "Current" date the horizon was measured from.
        forecast: Dynamic forecast up to the target month.
        sensitivity: Perturbed regression predictions.
        alert: Threshold alert over the forecast points.
        forecast_family: Time-series family behind the forecast.
        sensitivity_family: Regression family behind the sensitivity run.
        computed_at: UTC completion time.
    """

    params: RecomputeRequest
    reference_date: date
    forecast: DynamicForecast
    sensitivity: SensitivityResult
    alert: AlertState
    forecast_family: str
    sensitivity_family: str
    computed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_response(self) -> RecomputeResponse:
        """Render as the API response schema."""
        fc = self.forecast.forecast
        return RecomputeResponse(
            model_type=self.forecast_family,
            reference_date=self.reference_date,
            target=self.forecast.target,
            horizon=self.forecast.horizon,
            confidence_level=fc.level,
            forecasts=[
                ForecastPointResponse(
                    date=d, forecast=float(p), lower_bound=float(lo), upper_bound=float(hi)
                )
                for d, p, lo, hi in zip(fc.dates, fc.point, fc.lower, fc.upper, strict=True)
            ],
            window=[
                WindowPointResponse(
                    date=point.date,
                    value=point.value,
                    kind=point.kind,
                    lower_bound=point.lower,
                    upper_bound=point.upper,
                )
                for point in self.forecast.window()
            ],
            sensitivity=SensitivityResponse(
                model_type=self.sensitivity_family,
                predictor=self.sensitivity.predictor,
                adjustment_pct=self.sensitivity.adjustment_pct,
                mean_drift=self.sensitivity.mean_drift,
                points=[
                    SensitivityPointResponse(actual=float(a), baseline=float(b), predicted=float(p))
                    for a, b, p in zip(
                        self.sensitivity.actual,
                        self.sensitivity.baseline,
                        self.sensitivity.predicted,
                        strict=True,
                    )
                ],
            ),
            alert=AlertResponse(
                threshold=self.alert.threshold,
                triggered=self.alert.triggered,
                message=self.alert.message,
            ),
            computed_at=self.computed_at,
        )


class ScenarioService:
    """Recompute forecast, sensitivity and alert from fixed models.

    Attributes:
        fitted: Read-only models of the current run.
        settings: Application settings.
    """

    def __init__(self, fitted: FittedModels, settings: Settings | None = None) -> None:
        self.fitted = fitted
        self.settings = settings or get_settings()
        self.engine = DynamicForecastEngine(
            fitted.time_series_model,
            level=self.settings.forecast_confidence_level,
            max_horizon=self.settings.forecast_max_horizon,
        )
        self.analyzer = SensitivityAnalyzer()
        self.alerts = AlertEvaluator()

    def _resolve_predictor(self, requested: str | None) -> str:
        """Requested predictor, else the configured one, else the top-ranked input.

        An explicitly requested predictor is passed through unchanged so an
        unknown name is rejected by the analyzer.
        """
        if requested is not None:
            return requested
        predictors = self.fitted.regression_model.predictors
        configured = self.settings.sensitivity_predictor
        if configured in predictors:
            return configured
        logger.warning(
            "scenarios.sensitivity_predictor_unavailable",
            configured=configured,
            fallback=predictors[0],
        )
        return predictors[0]

    def recompute(self, params: RecomputeRequest, current: date | None = None) -> ScenarioResult:
        """Compute a fresh result for ``params``.

        Args:
            params: Recomputation parameters.
            current: Reference "today" (default: configured reference date,
                else the real date).

        Returns:
            ScenarioResult; nothing is stored here.

        Raises:
            InvalidHorizon: If the target month is not in the future.
            ValidationError: If the predictor is not a model input.
        """
        reference = current or self.settings.forecast_reference_date or date.today()
        with log_duration(
            logger,
            "scenarios.recompute",
            target=f"{params.target_year:04d}-{params.target_month:02d}",
            adjustment_pct=params.adjustment_pct,
        ) as summary:
            forecast = self.engine.run(
                params.target_year,
                params.target_month,
                current=reference,
                history_points=params.history_points,
            )
            sensitivity = self.analyzer.analyze(
                self.fitted.regression_model,
                self.fitted.regression_test,
                predictor=self._resolve_predictor(params.predictor),
                adjustment_pct=params.adjustment_pct,
            )
            alert = self.alerts.evaluate(forecast.forecast.point, params.threshold)
            summary.update(horizon=forecast.horizon, alert_triggered=alert.triggered)

        return ScenarioResult(
            params=params,
            reference_date=reference,
            forecast=forecast,
            sensitivity=sensitivity,
            alert=alert,
            forecast_family=self.fitted.time_series_model.family.value,
            sensitivity_family=self.fitted.regression_model.family.value,
        )


class ScenarioSession:
    """Single-writer wrapper holding the last successful result.

    Requests are serialized with a lock, so recomputations never overlap.
    A failed request leaves the previous result untouched.
    """

    def __init__(self, service: ScenarioService) -> None:
        self.service = service
        self._lock = threading.Lock()
        self._last: ScenarioResult | None = None

    @property
    def last(self) -> ScenarioResult | None:
        return self._last

    def submit(self, params: RecomputeRequest, current: date | None = None) -> ScenarioResult:
        """Recompute and, on success, replace the last result.

        Raises:
            PPILabError: Any recomputation failure, after logging it.
        """
        with self._lock:
            try:
                result = self.service.recompute(params, current=current)
            except PPILabError as exc:
                logger.warning(
                    "scenarios.recompute_failed",
                    error=exc.message,
                    error_type=type(exc).__name__,
                    kept_previous=self._last is not None,
                )
                raise
            self._last = result
            return result
