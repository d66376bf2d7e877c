"""Time-series model bank and dynamic forecasting.

Exports:
    Models:
        - TimeSeriesForecaster: Base class for statsmodels forecasters
        - ArimaForecaster: ARIMA with automatic order selection
        - EtsForecaster: ETS with automatic form selection
        - forecaster_for, model_factory

    Bank:
        - TimeSeriesModelBank: Fit + in-sample evaluation + fixed forecast

    Engine:
        - DynamicForecastEngine: Horizon from target month, forecast on demand
"""

from ppilab.features.forecasting.bank import TimeSeriesModelBank
from ppilab.features.forecasting.engine import (
    DynamicForecast,
    DynamicForecastEngine,
    WindowPoint,
)
from ppilab.features.forecasting.models import (
    ArimaForecaster,
    EtsForecaster,
    TimeSeriesForecaster,
    forecaster_for,
    model_factory,
)
from ppilab.features.forecasting.schemas import (
    ArimaModelConfig,
    EtsModelConfig,
    ModelConfigBase,
    TimeSeriesModelConfig,
)

__all__ = [
    "ArimaForecaster",
    "ArimaModelConfig",
    "DynamicForecast",
    "DynamicForecastEngine",
    "EtsForecaster",
    "EtsModelConfig",
    "ModelConfigBase",
    "TimeSeriesForecaster",
    "TimeSeriesModelBank",
    "TimeSeriesModelConfig",
    "WindowPoint",
    "forecaster_for",
    "model_factory",
]
