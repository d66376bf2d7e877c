"""Time-series model bank: in-sample evaluation plus a fixed-horizon forecast.

Each family is fitted on the full history. Metrics compare the series with
its one-step-ahead fitted values (in-sample goodness of fit, not held-out
error), and every survivor also produces a fixed-horizon Forecast.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from ppilab.core.exceptions import ModelFitFailure
from ppilab.features.data.models import Series
from ppilab.features.evaluation.bank import ModelBank
from ppilab.features.evaluation.metrics import MetricEvaluator
from ppilab.features.evaluation.results import EvaluationResult
from ppilab.features.forecasting.models import (
    ArimaForecaster,
    EtsForecaster,
    TimeSeriesForecaster,
)
from ppilab.shared.models import TrainedModel


class TimeSeriesModelBank(ModelBank[TimeSeriesForecaster]):
    """Fit ARIMA and ETS (by default) against the same Series.

    Attributes:
        horizon: Fixed forecast length attached to every evaluation.
        level: Interval coverage of that forecast.
    """

    name = "forecasting"

    def __init__(
        self,
        members: Sequence[TimeSeriesForecaster] | None = None,
        horizon: int = 12,
        level: float = 0.95,
        n_jobs: int = 1,
        evaluator: MetricEvaluator | None = None,
    ) -> None:
        """Initialize the bank.

        Args:
            members: Forecasters in priority order (default: ARIMA, ETS).
            horizon: Fixed forecast horizon.
            level: Forecast interval coverage.
            n_jobs: Number of parallel fits.
            evaluator: Metric evaluator.
        """
        super().__init__(
            members if members is not None else [ArimaForecaster(), EtsForecaster()],
            n_jobs=n_jobs,
            evaluator=evaluator,
        )
        if horizon < 1:
            raise ValueError(f"horizon must be at least 1, got {horizon}")
        self.horizon = horizon
        self.level = level

    def _fit_and_evaluate(
        self, member: TimeSeriesForecaster, order: int, data: Series
    ) -> tuple[TrainedModel, EvaluationResult]:
        model = member.fit(data)
        fitted = member.fitted_values(model)
        actuals = np.array(data.values)
        if len(fitted) != len(actuals) or not np.all(np.isfinite(fitted)):
            raise ModelFitFailure(member.family.value, "fitted values are misaligned or non-finite")

        return model, EvaluationResult(
            family=member.family,
            metrics=self.evaluator.evaluate(actuals, fitted),
            actuals=actuals,
            predictions=fitted,
            registration_order=order,
            forecast=member.forecast(model, self.horizon, level=self.level),
        )
