"""Dynamic forecasts for arbitrary target months from an already fitted model.

The horizon is the number of calendar months from a reference "current"
month to the requested target month:

    h = (target_year - current_year) * 12 + (target_month - current_month)

CRITICAL: h <= 0 is a user-input error. It raises InvalidHorizon before any
computation and is never clamped. The model is never refitted here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
from typing import Literal

import structlog

from ppilab.core.exceptions import InvalidHorizon, ValidationError
from ppilab.features.data.models import Series
from ppilab.features.forecasting.models import forecaster_for
from ppilab.shared.models import Forecast, TrainedModel

logger = structlog.get_logger()


@dataclass(frozen=True)
class WindowPoint:
    """One point of the display window."""

    date: date_type
    value: float
    kind: Literal["history", "forecast"]
    lower: float | None = None
    upper: float | None = None


@dataclass(frozen=True, eq=False)
class DynamicForecast:
    """Forecast for a requested target month plus a display window.

    Attributes:
        target: First day of the requested target month.
        horizon: Number of forecast months.
        forecast: Full forecast over the horizon.
        history: Trailing historical observations shown with the forecast.
    """

    target: date_type
    horizon: int
    forecast: Forecast
    history: Series

    @property
    def history_points(self) -> int:
        return len(self.history)

    def window(self) -> list[WindowPoint]:
        """Trailing history followed by every forecast step."""
        points = [
            WindowPoint(date=d, value=float(v), kind="history")
            for d, v in zip(self.history.dates, self.history.values, strict=True)
        ]
        points.extend(
            WindowPoint(date=d, value=float(p), kind="forecast", lower=float(lo), upper=float(hi))
            for d, p, lo, hi in zip(
                self.forecast.dates,
                self.forecast.point,
                self.forecast.lower,
                self.forecast.upper,
                strict=True,
            )
        )
        return points


class DynamicForecastEngine:
    """Regenerate interval forecasts on demand from one fitted time-series model.

    Attributes:
        model: Fitted time-series artifact (read-only, shared).
        level: Interval coverage.
        max_horizon: Largest horizon accepted.
    """

    def __init__(self, model: TrainedModel, level: float = 0.95, max_horizon: int = 240) -> None:
        """Initialize the engine.

        Args:
            model: Fitted ARIMA or ETS artifact.
            level: Interval coverage.
            max_horizon: Largest horizon accepted.

        Raises:
            ValueError: If ``model`` is not a time-series model.
        """
        if not model.family.is_time_series or model.training_series is None:
            raise ValueError(f"Not a fitted time-series model: {model.family.value}")
        self.model = model
        self.level = level
        self.max_horizon = max_horizon
        self._forecaster = forecaster_for(model.family)

    @staticmethod
    def compute_horizon(target_year: int, target_month: int, current: date_type) -> int:
        """Months from ``current``'s month to the target month.

        Raises:
            InvalidHorizon: If the month is out of range or the target is not
                strictly after the current month.
        """
        if not 1 <= target_month <= 12:
            raise InvalidHorizon(f"Target month must be between 1 and 12, got {target_month}")
        horizon = (target_year - current.year) * 12 + (target_month - current.month)
        if horizon <= 0:
            raise InvalidHorizon("Target date must be in the future", horizon=horizon)
        return horizon

    def run(
        self,
        target_year: int,
        target_month: int,
        current: date_type,
        history_points: int,
    ) -> DynamicForecast:
        """Forecast up to the target month.

        Args:
            target_year: Requested year.
            target_month: Requested month (1-12).
            current: Reference "today".
            history_points: Trailing observations to include for display;
                clamped to the available history.

        Returns:
            DynamicForecast over the computed horizon.

        Raises:
            InvalidHorizon: If the target is not in the future or too far.
            ValidationError: If history_points < 1.
        """
        horizon = self.compute_horizon(target_year, target_month, current)
        if horizon > self.max_horizon:
            raise InvalidHorizon(
                f"Target is {horizon} months ahead; the maximum is {self.max_horizon}",
                horizon=horizon,
            )
        if history_points < 1:
            raise ValidationError(f"history_points must be positive, got {history_points}")

        history = self.model.training_series
        if history is None:  # guarded in __init__
            raise ValueError("Time-series model was fitted without a training series")

        forecast = self._forecaster.forecast(self.model, horizon, level=self.level)

        logger.info(
            "forecasting.dynamic_forecast_generated",
            family=self.model.family.value,
            horizon=horizon,
            target=f"{target_year:04d}-{target_month:02d}",
            current=str(current),
            history_points=min(history_points, len(history)),
        )

        return DynamicForecast(
            target=date_type(target_year, target_month, 1),
            horizon=horizon,
            forecast=forecast,
            history=history.tail(history_points),
        )
