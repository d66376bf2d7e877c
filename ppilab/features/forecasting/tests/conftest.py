"""Test fixtures for forecasting module."""

from datetime import date

import numpy as np
import pytest

from ppilab.features.data.models import Series, add_months
from ppilab.features.forecasting.models import ArimaForecaster, EtsForecaster
from ppilab.features.forecasting.schemas import ArimaModelConfig, EtsModelConfig
from ppilab.shared.models import TrainedModel


def make_trend_series(n_months: int = 60, slope: float = 0.5, seed: int = 11) -> Series:
    """Monthly linear trend with small noise, starting January 2019."""
    rng = np.random.default_rng(seed)
    t = np.arange(n_months, dtype=np.float64)
    values = 100.0 + slope * t + rng.normal(0, 0.5, n_months)
    dates = tuple(add_months(date(2019, 1, 1), i) for i in range(n_months))
    return Series(dates=dates, values=values, name="agriculture")


@pytest.fixture(scope="module")
def trend_series() -> Series:
    """60 months of a noisy linear trend ending December 2023."""
    return make_trend_series()


@pytest.fixture(scope="module")
def arima_forecaster() -> ArimaForecaster:
    return ArimaForecaster(ArimaModelConfig(max_p=1, max_d=1, max_q=1))


@pytest.fixture(scope="module")
def ets_forecaster() -> EtsForecaster:
    return EtsForecaster(EtsModelConfig(allow_seasonal=False))


@pytest.fixture(scope="module")
def arima_model(arima_forecaster: ArimaForecaster, trend_series: Series) -> TrainedModel:
    """ARIMA fitted once per module."""
    return arima_forecaster.fit(trend_series)


@pytest.fixture(scope="module")
def ets_model(ets_forecaster: EtsForecaster, trend_series: Series) -> TrainedModel:
    """ETS fitted once per module."""
    return ets_forecaster.fit(trend_series)
