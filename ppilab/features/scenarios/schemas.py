"""Pydantic schemas for scenario recomputation.

Defaults mirror the interactive form: target December 2025, +10% predictor
adjustment; the window size (80) and alert threshold (180) come from settings.
"""

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ppilab.core.config import get_settings


class RecomputeRequest(BaseModel):
    """Parameters of one user-triggered recomputation.

    Attributes:
        target_year: Year of the last month to forecast.
        target_month: Month (1-12) of the last month to forecast.
        adjustment_pct: Percentage change applied to the sensitivity predictor.
        history_points: Trailing historical observations in the display window.
        threshold: Alert threshold on forecast point estimates.
        predictor: Column to perturb; the configured default when omitted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    target_year: int = Field(default=2025, ge=1900, le=2200, description="Target year")
    target_month: int = Field(default=12, ge=1, le=12, description="Target month (1-12)")
    adjustment_pct: float = Field(
        default=10.0,
        description="Predictor change in percent (e.g. 10 for +10%, -5 for -5%)",
    )
    history_points: int = Field(
        default_factory=lambda: get_settings().default_history_points,
        ge=1,
        description="Historical points shown before the forecast",
    )
    threshold: float = Field(
        default_factory=lambda: get_settings().default_alert_threshold,
        description="Alert threshold",
    )
    predictor: str | None = Field(
        default=None, min_length=1, description="Predictor to perturb (default: configured)"
    )


class ForecastPointResponse(BaseModel):
    """One forecast step with its prediction interval."""

    date: date_type
    forecast: float
    lower_bound: float
    upper_bound: float


class WindowPointResponse(BaseModel):
    """One point of the history-plus-forecast display window."""

    date: date_type
    value: float
    kind: Literal["history", "forecast"]
    lower_bound: float | None = None
    upper_bound: float | None = None


class SensitivityPointResponse(BaseModel):
    """Actual value paired with unperturbed and perturbed predictions."""

    actual: float
    baseline: float
    predicted: float


class SensitivityResponse(BaseModel):
    """Sensitivity analysis outcome."""

    model_type: str
    predictor: str
    adjustment_pct: float
    mean_drift: float
    points: list[SensitivityPointResponse]


class AlertResponse(BaseModel):
    """Alert state for the current forecast."""

    threshold: float
    triggered: bool
    message: str


class RecomputeResponse(BaseModel):
    """Forecast, sensitivity and alert for one set of parameters.

    Attributes:
        model_type: Time-series family that produced the forecast.
        reference_date: "Current" date the horizon was measured from.
        target: First day of the target month.
        horizon: Number of forecast months.
        confidence_level: Prediction interval coverage.
        forecasts: Forecast steps with interval bounds.
        window: Trailing history followed by the forecast steps.
        sensitivity: Sensitivity analysis outcome.
        alert: Threshold alert.
        computed_at: UTC time the result was produced.
    """

    model_type: str
    reference_date: date_type
    target: date_type
    horizon: int
    confidence_level: float
    forecasts: list[ForecastPointResponse]
    window: list[WindowPointResponse]
    sensitivity: SensitivityResponse
    alert: AlertResponse
    computed_at: datetime
