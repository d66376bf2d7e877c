"""Time-series model families built on statsmodels.

Both forecasters follow the Trainable interface:
- fit(series) -> TrainedModel
- predict(model, horizon) -> np.ndarray
plus forecast() for interval forecasts and fitted_values() for in-sample
one-step-ahead reconstructions.

CRITICAL: A fitted model is only ever read afterwards. Forecasting from it
for a new horizon never refits.
"""

from __future__ import annotations

import itertools
import warnings
from abc import abstractmethod
from collections.abc import Callable
from typing import Any

import numpy as np
import pandas as pd
import structlog
from statsmodels.tools.sm_exceptions import ConvergenceWarning
from statsmodels.tsa.arima.model import ARIMA
from statsmodels.tsa.exponential_smoothing.ets import ETSModel
from statsmodels.tsa.stattools import kpss

from ppilab.core.exceptions import InvalidHorizon, ModelFitFailure
from ppilab.features.data.models import Series, add_months
from ppilab.features.forecasting.schemas import (
    ArimaModelConfig,
    EtsModelConfig,
    TimeSeriesModelConfig,
)
from ppilab.shared.models import Forecast, ModelFamily, Trainable, TrainedModel

logger = structlog.get_logger()

FloatArray = np.ndarray[Any, np.dtype[np.floating[Any]]]

# Exceptions statsmodels raises for numerically hopeless candidates
_FIT_ERRORS = (ValueError, np.linalg.LinAlgError, IndexError, OverflowError)


def _fit_quietly(fit: Callable[[], Any]) -> tuple[Any, bool]:
    """Run a statsmodels fit, capturing warnings.

    Returns:
        Tuple of (results, converged). A ConvergenceWarning or an optimizer
        report of non-convergence marks the fit as not converged.
    """
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        results = fit()
    if any(issubclass(w.category, ConvergenceWarning) for w in caught):
        return results, False
    retvals = getattr(results, "mle_retvals", None) or {}
    return results, bool(retvals.get("converged", True))


class TimeSeriesForecaster(Trainable):
    """Base class for statsmodels-backed forecasters.

    Attributes:
        config: Family configuration.
    """

    def __init__(self, config: TimeSeriesModelConfig) -> None:
        """Initialize the forecaster.

        Args:
            config: Family configuration.
        """
        self.config = config

    @abstractmethod
    def _search(self, y: pd.Series) -> tuple[Any, dict[str, Any]]:
        """Fit all candidate forms and return (best results, chosen params)."""

    @abstractmethod
    def _interval_forecast(
        self, results: Any, n_obs: int, horizon: int, alpha: float  # noqa: ANN401
    ) -> tuple[FloatArray, FloatArray, FloatArray]:
        """Return (mean, lower, upper) arrays for ``horizon`` steps."""

    def fit(self, data: Series) -> TrainedModel:
        """Fit the family on a full monthly history.

        Args:
            data: Series to fit.

        Returns:
            Fitted artifact holding the statsmodels results object.

        Raises:
            ModelFitFailure: If no candidate form converges.
        """
        results, params = self._search(data.to_pandas())
        return TrainedModel(
            family=self.family,
            estimator=results,
            target=data.name,
            training_rows=tuple(range(len(data))),
            training_series=data,
            params=params,
            config_hash=self.config.config_hash(),
        )

    def predict(self, model: TrainedModel, inputs: int) -> FloatArray:
        """Point forecasts for ``inputs`` steps ahead."""
        return np.array(self.forecast(model, inputs).point)

    def forecast(self, model: TrainedModel, horizon: int, level: float = 0.95) -> Forecast:
        """Interval forecast for ``horizon`` months after the last observation.

        Args:
            model: Artifact from fit().
            horizon: Number of months to forecast.
            level: Interval coverage.

        Returns:
            Forecast with point estimates and bounds.

        Raises:
            InvalidHorizon: If horizon < 1.
        """
        self._check_family(model)
        if horizon < 1:
            raise InvalidHorizon(f"Forecast horizon must be at least 1, got {horizon}", horizon)
        history = model.training_series
        if history is None:
            raise ValueError("Time-series model was fitted without a training series")

        mean, lower, upper = self._interval_forecast(
            model.estimator, len(history), horizon, 1.0 - level
        )
        return Forecast(
            dates=tuple(add_months(history.end, step) for step in range(1, horizon + 1)),
            point=mean,
            lower=lower,
            upper=upper,
            level=level,
        )

    def fitted_values(self, model: TrainedModel) -> FloatArray:
        """One-step-ahead in-sample predictions over the training span.

        Observations the state-space filter spends on diffuse initialization
        (``loglikelihood_burn``, e.g. the first month of a differenced
        ARIMA) have no informative prediction; they are reported as the
        observed value so they do not dominate in-sample error.
        """
        self._check_family(model)
        fitted = np.array(model.estimator.fittedvalues, dtype=np.float64)
        burn = min(int(getattr(model.estimator, "loglikelihood_burn", 0) or 0), len(fitted))
        if burn and model.training_series is not None:
            fitted[:burn] = model.training_series.values[:burn]
        return fitted


class ArimaForecaster(TimeSeriesForecaster):
    """ARIMA with automatic order selection."""

    family = ModelFamily.ARIMA

    def __init__(self, config: ArimaModelConfig | None = None) -> None:
        super().__init__(config or ArimaModelConfig())
        self.config: ArimaModelConfig

    def _differencing_order(self, y: FloatArray) -> int:
        values = y
        for d in range(self.config.max_d):
            if len(values) < 4 or np.ptp(values) == 0:
                return d
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                try:
                    _, p_value, _, _ = kpss(values, regression="c", nlags="auto")
                except _FIT_ERRORS:
                    return d
            if not p_value < self.config.kpss_alpha:
                return d
            values = np.diff(values)
        return self.config.max_d

    @staticmethod
    def _trend_options(d: int) -> tuple[str, ...]:
        # Lower-order trend terms vanish under differencing
        if d == 0:
            return ("c", "n")
        if d == 1:
            return ("t", "n")
        return ("n",)

    def _search(self, y: pd.Series) -> tuple[Any, dict[str, Any]]:
        d = self._differencing_order(y.to_numpy())
        criterion = self.config.information_criterion
        best: tuple[float, Any, dict[str, Any]] | None = None
        n_failed = 0

        grid = itertools.product(
            range(self.config.max_p + 1),
            range(self.config.max_q + 1),
            self._trend_options(d),
        )
        for p, q, trend in grid:
            try:
                results, converged = _fit_quietly(
                    lambda p=p, q=q, trend=trend: ARIMA(y, order=(p, d, q), trend=trend).fit()
                )
            except _FIT_ERRORS as exc:
                logger.debug("forecasting.arima_candidate_failed", order=(p, d, q), error=str(exc))
                n_failed += 1
                continue
            score = float(getattr(results, criterion))
            if not converged or not np.isfinite(score):
                n_failed += 1
                continue
            if best is None or score < best[0]:
                best = (score, results, {"order": (p, d, q), "trend": trend, criterion: score})

        if best is None:
            raise ModelFitFailure(
                self.family.value, f"none of {n_failed} ARIMA candidates converged (d={d})"
            )

        logger.info("forecasting.arima_order_selected", n_failed=n_failed, **best[2])
        return best[1], best[2]

    def _interval_forecast(
        self, results: Any, n_obs: int, horizon: int, alpha: float  # noqa: ANN401, ARG002
    ) -> tuple[FloatArray, FloatArray, FloatArray]:
        prediction = results.get_forecast(steps=horizon)
        interval = np.asarray(prediction.conf_int(alpha=alpha), dtype=np.float64)
        mean = np.asarray(prediction.predicted_mean, dtype=np.float64)
        return mean, interval[:, 0], interval[:, 1]


class EtsForecaster(TimeSeriesForecaster):
    """Exponential smoothing state-space model with automatic form selection."""

    family = ModelFamily.ETS

    def __init__(self, config: EtsModelConfig | None = None) -> None:
        super().__init__(config or EtsModelConfig())
        self.config: EtsModelConfig

    def _candidate_forms(self, n_obs: int) -> list[dict[str, Any]]:
        trends: list[tuple[str | None, bool]] = [(None, False), ("add", False)]
        if self.config.allow_damped:
            trends.append(("add", True))
        seasonals: list[str | None] = [None]
        if self.config.allow_seasonal and n_obs >= 2 * self.config.seasonal_periods:
            seasonals.append("add")
        return [
            {"error": "add", "trend": trend, "damped_trend": damped, "seasonal": seasonal}
            for (trend, damped), seasonal in itertools.product(trends, seasonals)
        ]

    def _search(self, y: pd.Series) -> tuple[Any, dict[str, Any]]:
        criterion = self.config.information_criterion
        best: tuple[float, Any, dict[str, Any]] | None = None
        n_failed = 0

        for form in self._candidate_forms(len(y)):
            seasonal_periods = self.config.seasonal_periods if form["seasonal"] else None
            try:
                results, converged = _fit_quietly(
                    lambda form=form, sp=seasonal_periods: ETSModel(
                        y, seasonal_periods=sp, **form
                    ).fit(disp=False)
                )
            except _FIT_ERRORS as exc:
                logger.debug("forecasting.ets_candidate_failed", form=form, error=str(exc))
                n_failed += 1
                continue
            score = float(getattr(results, criterion))
            if not converged or not np.isfinite(score):
                n_failed += 1
                continue
            if best is None or score < best[0]:
                best = (score, results, {**form, criterion: score})

        if best is None:
            raise ModelFitFailure(self.family.value, f"none of {n_failed} ETS forms converged")

        logger.info("forecasting.ets_form_selected", n_failed=n_failed, **best[2])
        return best[1], best[2]

    def _interval_forecast(
        self, results: Any, n_obs: int, horizon: int, alpha: float  # noqa: ANN401
    ) -> tuple[FloatArray, FloatArray, FloatArray]:
        prediction = results.get_prediction(start=n_obs, end=n_obs + horizon - 1)
        frame = prediction.summary_frame(alpha=alpha)
        return (
            frame["mean"].to_numpy(dtype=np.float64),
            frame["pi_lower"].to_numpy(dtype=np.float64),
            frame["pi_upper"].to_numpy(dtype=np.float64),
        )


_FORECASTERS: dict[ModelFamily, type[TimeSeriesForecaster]] = {
    ModelFamily.ARIMA: ArimaForecaster,
    ModelFamily.ETS: EtsForecaster,
}


def forecaster_for(family: ModelFamily) -> TimeSeriesForecaster:
    """Forecaster able to predict from an already fitted model of ``family``.

    Raises:
        ValueError: If ``family`` is not a time-series family.
    """
    try:
        return _FORECASTERS[family]()
    except KeyError:
        raise ValueError(f"Not a time-series model family: {family.value}") from None


def model_factory(config: TimeSeriesModelConfig) -> TimeSeriesForecaster:
    """Create a forecaster instance from a configuration."""
    family = ModelFamily(config.model_type)
    forecaster_cls = _FORECASTERS[family]
    return forecaster_cls(config)  # type: ignore[arg-type]
