"""Shared pytest fixtures for PPILab tests."""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from ppilab.core.config import Settings
from ppilab.features.data.loader import LoadedData, prepare_dataset
from ppilab.features.forecasting.bank import TimeSeriesModelBank
from ppilab.features.forecasting.models import ArimaForecaster, EtsForecaster
from ppilab.features.forecasting.schemas import ArimaModelConfig, EtsModelConfig
from ppilab.features.pipeline.service import PipelineResult, TrainingPipeline
from ppilab.features.regression.bank import RegressionModelBank
from ppilab.features.regression.features import FeatureSelector
from ppilab.features.regression.models import (
    GradientBoostingModel,
    KnnModel,
    LinearRegressor,
    RandomForestModel,
)
from ppilab.features.regression.schemas import (
    GradientBoostingConfig,
    KnnConfig,
    RandomForestConfig,
)

# Pinned "today" so horizons in tests do not depend on the wall clock
REFERENCE_DATE = date(2024, 1, 15)


def make_ppi_frame(n_months: int = 72, seed: int = 7) -> pd.DataFrame:
    """Synthetic monthly sector indices starting January 2018.

    ``agriculture`` is driven mostly by ``mining`` and ``manufacturing``;
    ``energy`` and ``utilities`` are weaker signals.
    """
    rng = np.random.default_rng(seed)
    t = np.arange(n_months, dtype=np.float64)
    mining = 100.0 + 0.8 * t + 5.0 * np.sin(2 * np.pi * t / 12) + rng.normal(0, 1.0, n_months)
    manufacturing = 90.0 + 0.5 * t + rng.normal(0, 1.5, n_months)
    energy = 110.0 + np.cumsum(rng.normal(0, 1.0, n_months))
    utilities = 95.0 + 0.3 * t + rng.normal(0, 2.0, n_months)
    agriculture = 20.0 + 0.6 * mining + 0.4 * manufacturing + rng.normal(0, 1.0, n_months)
    return pd.DataFrame(
        {
            "date": pd.date_range("2018-01-01", periods=n_months, freq="MS").strftime("%Y-%m-%d"),
            "agriculture": agriculture,
            "mining": mining,
            "manufacturing": manufacturing,
            "energy": energy,
            "utilities": utilities,
        }
    )


def make_test_settings(**overrides: object) -> Settings:
    """Settings with a pinned reference date and small model grids."""
    values: dict[str, object] = {
        "app_env": "testing",
        "forecast_reference_date": REFERENCE_DATE,
        "arima_max_p": 1,
        "arima_max_q": 1,
        "feature_selector_n_estimators": 50,
        "artifacts_path": "./does-not-exist/fitted_models.joblib",
        "data_path": "./does-not-exist/ppi_cleaned.csv",
    }
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


def make_test_pipeline(settings: Settings) -> TrainingPipeline:
    """Pipeline with the full family set but shrunken hyperparameters."""
    return TrainingPipeline(
        settings=settings,
        time_series_bank=TimeSeriesModelBank(
            members=[
                ArimaForecaster(ArimaModelConfig(max_p=1, max_d=1, max_q=1)),
                EtsForecaster(EtsModelConfig(allow_seasonal=False)),
            ],
            horizon=settings.forecast_fixed_horizon,
            level=settings.forecast_confidence_level,
        ),
        regression_bank=RegressionModelBank(
            members=[
                LinearRegressor(),
                RandomForestModel(RandomForestConfig(n_estimators=50)),
                GradientBoostingModel(GradientBoostingConfig(n_estimators=100, learning_rate=0.1)),
                KnnModel(KnnConfig(n_neighbors=5)),
            ]
        ),
        feature_selector=FeatureSelector(n_estimators=50, random_state=settings.random_seed),
    )


@pytest.fixture
def ppi_frame() -> pd.DataFrame:
    """Six years of synthetic monthly sector indices."""
    return make_ppi_frame()


@pytest.fixture
def ppi_data(ppi_frame: pd.DataFrame) -> LoadedData:
    """Series + TabularDataset views of the synthetic indices."""
    return prepare_dataset(ppi_frame, timestamp_column="date", target_column="agriculture")


@pytest.fixture
def fast_settings() -> Settings:
    """Settings tuned for fast, reproducible tests."""
    return make_test_settings()


@pytest.fixture(scope="session")
def pipeline_result() -> PipelineResult:
    """One fitted pipeline run shared by the whole test session.

    Read-only: tests must not mutate anything reachable from it.
    """
    data = prepare_dataset(make_ppi_frame(), timestamp_column="date", target_column="agriculture")
    settings = make_test_settings()
    return make_test_pipeline(settings).run(data)


@pytest.fixture
def fast_pipeline(fast_settings: Settings) -> TrainingPipeline:
    """TrainingPipeline with shrunken hyperparameters."""
    return make_test_pipeline(fast_settings)

