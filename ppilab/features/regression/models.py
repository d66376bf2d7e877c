"""Regression model families built on scikit-learn.

All regressors follow the Trainable interface:
- fit(split) -> TrainedModel  (uses the train partition only)
- predict(model, frame) -> np.ndarray

CRITICAL: All implementations are deterministic with a fixed random_state.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator  # type: ignore[import-untyped]
from sklearn.ensemble import (  # type: ignore[import-untyped]
    GradientBoostingRegressor,
    RandomForestRegressor,
)
from sklearn.linear_model import LinearRegression  # type: ignore[import-untyped]
from sklearn.neighbors import KNeighborsRegressor  # type: ignore[import-untyped]
from sklearn.pipeline import Pipeline  # type: ignore[import-untyped]
from sklearn.preprocessing import StandardScaler  # type: ignore[import-untyped]

from ppilab.core.exceptions import ModelFitFailure, ValidationError
from ppilab.features.data.models import TrainTestSplit
from ppilab.features.regression.schemas import (
    GradientBoostingConfig,
    KnnConfig,
    LinearRegressionConfig,
    RandomForestConfig,
    RegressionModelConfig,
)
from ppilab.shared.models import ModelFamily, Trainable, TrainedModel

FloatArray = np.ndarray[Any, np.dtype[np.floating[Any]]]


class Regressor(Trainable):
    """Base class for scikit-learn regressors.

    Attributes:
        config: Family configuration.
        random_state: Random seed for reproducibility.
    """

    def __init__(self, config: RegressionModelConfig, random_state: int = 42) -> None:
        """Initialize the regressor.

        Args:
            config: Family configuration.
            random_state: Random seed for reproducibility.
        """
        self.config = config
        self.random_state = random_state

    @abstractmethod
    def _build_estimator(self) -> BaseEstimator:
        """Return a fresh, unfitted scikit-learn estimator."""

    def _check_trainable(self, split: TrainTestSplit) -> None:  # noqa: B027
        """Hook for family-specific input requirements."""

    def fit(self, data: TrainTestSplit) -> TrainedModel:
        """Fit on the train partition of ``data``.

        Args:
            data: Train/test split restricted to the modeling predictors.

        Returns:
            Fitted artifact recording predictors and training rows.

        Raises:
            ModelFitFailure: If the estimator rejects the training data.
        """
        self._check_trainable(data)
        estimator = self._build_estimator()
        try:
            estimator.fit(data.X_train, data.y_train)
        except (ValueError, np.linalg.LinAlgError) as exc:
            raise ModelFitFailure(self.family.value, str(exc)) from exc

        return TrainedModel(
            family=self.family,
            estimator=estimator,
            target=data.target,
            predictors=data.predictors,
            training_rows=data.train_rows,
            params=self.config.model_dump(exclude={"schema_version"}),
            config_hash=self.config.config_hash(),
        )

    def predict(self, model: TrainedModel, inputs: pd.DataFrame) -> FloatArray:
        """Predict for every row of ``inputs``.

        Args:
            model: Artifact from fit().
            inputs: Frame containing at least the model's predictor columns.

        Returns:
            Predictions aligned to the rows of ``inputs``.

        Raises:
            ValidationError: If a predictor column is missing.
        """
        self._check_family(model)
        missing = [p for p in model.predictors if p not in inputs.columns]
        if missing:
            raise ValidationError(
                f"Inputs are missing predictor columns: {missing}", details={"missing": missing}
            )
        features = inputs.loc[:, list(model.predictors)]
        return np.asarray(model.estimator.predict(features), dtype=np.float64)


class LinearRegressor(Regressor):
    """Ordinary least squares regression."""

    family = ModelFamily.LINEAR_REGRESSION

    def __init__(self, config: LinearRegressionConfig | None = None, random_state: int = 42) -> None:
        super().__init__(config or LinearRegressionConfig(), random_state)
        self.config: LinearRegressionConfig

    def _build_estimator(self) -> BaseEstimator:
        return LinearRegression(fit_intercept=self.config.fit_intercept)


class RandomForestModel(Regressor):
    """Random forest regressor."""

    family = ModelFamily.RANDOM_FOREST

    def __init__(self, config: RandomForestConfig | None = None, random_state: int = 42) -> None:
        super().__init__(config or RandomForestConfig(), random_state)
        self.config: RandomForestConfig

    def _build_estimator(self) -> BaseEstimator:
        return RandomForestRegressor(
            n_estimators=self.config.n_estimators,
            max_features=self.config.max_features,
            min_samples_leaf=self.config.min_samples_leaf,
            random_state=self.random_state,
            n_jobs=1,
        )


class GradientBoostingModel(Regressor):
    """Gradient-boosted regression trees."""

    family = ModelFamily.GRADIENT_BOOSTING

    def __init__(
        self, config: GradientBoostingConfig | None = None, random_state: int = 42
    ) -> None:
        super().__init__(config or GradientBoostingConfig(), random_state)
        self.config: GradientBoostingConfig

    def _build_estimator(self) -> BaseEstimator:
        return GradientBoostingRegressor(
            n_estimators=self.config.n_estimators,
            max_depth=self.config.max_depth,
            learning_rate=self.config.learning_rate,
            loss=self.config.loss,
            random_state=self.random_state,
        )


class KnnModel(Regressor):
    """k-nearest-neighbour regressor, optionally on standardized predictors."""

    family = ModelFamily.KNN

    def __init__(self, config: KnnConfig | None = None, random_state: int = 42) -> None:
        super().__init__(config or KnnConfig(), random_state)
        self.config: KnnConfig

    def _check_trainable(self, split: TrainTestSplit) -> None:
        n_train = len(split.train)
        if n_train < self.config.n_neighbors:
            raise ModelFitFailure(
                self.family.value,
                f"{self.config.n_neighbors} neighbours requested but only {n_train} training rows",
            )

    def _build_estimator(self) -> BaseEstimator:
        knn = KNeighborsRegressor(n_neighbors=self.config.n_neighbors)
        if not self.config.scale:
            return knn
        return Pipeline([("scale", StandardScaler()), ("knn", knn)])


_REGRESSORS: dict[ModelFamily, type[Regressor]] = {
    ModelFamily.LINEAR_REGRESSION: LinearRegressor,
    ModelFamily.RANDOM_FOREST: RandomForestModel,
    ModelFamily.GRADIENT_BOOSTING: GradientBoostingModel,
    ModelFamily.KNN: KnnModel,
}


def regressor_for(family: ModelFamily) -> Regressor:
    """Regressor able to predict from an already fitted model of ``family``.

    Raises:
        ValueError: If ``family`` is not a regression family.
    """
    try:
        return _REGRESSORS[family]()
    except KeyError:
        raise ValueError(f"Not a regression model family: {family.value}") from None


def model_factory(config: RegressionModelConfig, random_state: int = 42) -> Regressor:
    """Create a regressor instance from a configuration."""
    regressor_cls = _REGRESSORS[ModelFamily(config.model_type)]
    return regressor_cls(config, random_state=random_state)  # type: ignore[arg-type]


def default_regressors(random_state: int = 42) -> list[Regressor]:
    """The fixed comparison set, in registration (tie-break) order."""
    configs: list[RegressionModelConfig] = [
        LinearRegressionConfig(),
        RandomForestConfig(),
        GradientBoostingConfig(),
        KnnConfig(),
    ]
    return [model_factory(config, random_state=random_state) for config in configs]
