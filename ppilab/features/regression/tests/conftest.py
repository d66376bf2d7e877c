"""Test fixtures for regression module."""

import numpy as np
import pandas as pd
import pytest

from ppilab.features.data.loader import LoadedData
from ppilab.features.data.models import TabularDataset, TrainTestSplit
from ppilab.features.regression.models import (
    GradientBoostingModel,
    KnnModel,
    LinearRegressor,
    RandomForestModel,
    Regressor,
)
from ppilab.features.regression.schemas import (
    GradientBoostingConfig,
    KnnConfig,
    RandomForestConfig,
)


@pytest.fixture
def full_split(ppi_data: LoadedData) -> TrainTestSplit:
    """80/20 split over every predictor of the synthetic indices."""
    return ppi_data.dataset.split(test_size=0.2, random_state=42)


@pytest.fixture
def reduced_split(full_split: TrainTestSplit) -> TrainTestSplit:
    """Split restricted to three predictors."""
    return full_split.restrict(["mining", "manufacturing", "energy"])


@pytest.fixture
def tiny_split() -> TrainTestSplit:
    """Eight rows: too few for a 10-neighbour KNN."""
    rng = np.random.default_rng(5)
    frame = pd.DataFrame(
        {
            "mining": rng.normal(100, 5, 8),
            "energy": rng.normal(110, 5, 8),
            "agriculture": rng.normal(150, 5, 8),
        }
    )
    return TabularDataset(frame=frame, target="agriculture").split(0.25, random_state=42)


@pytest.fixture
def fast_regressors() -> list[Regressor]:
    """All four families with small ensembles, in priority order."""
    return [
        LinearRegressor(),
        RandomForestModel(RandomForestConfig(n_estimators=50)),
        GradientBoostingModel(GradientBoostingConfig(n_estimators=100, learning_rate=0.1)),
        KnnModel(KnnConfig(n_neighbors=5)),
    ]
