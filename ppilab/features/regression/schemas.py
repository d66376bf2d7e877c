"""Pydantic configuration schemas for regression model families.

Defaults reproduce the fixed comparison grid: every family is trained once
with these settings on the same train/test partition.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from ppilab.features.forecasting.schemas import ModelConfigBase


class LinearRegressionConfig(ModelConfigBase):
    """Ordinary least squares.

    Attributes:
        fit_intercept: Whether to estimate an intercept.
    """

    model_type: Literal["linear_regression"] = "linear_regression"
    fit_intercept: bool = True


class RandomForestConfig(ModelConfigBase):
    """Random forest regressor.

    Attributes:
        n_estimators: Number of trees.
        max_features: Predictors sampled per split.
        min_samples_leaf: Minimum rows per leaf.
    """

    model_type: Literal["random_forest"] = "random_forest"
    n_estimators: int = Field(default=1000, ge=1, le=5000, description="Number of trees")
    max_features: Literal["sqrt", "log2"] | float = Field(
        default="sqrt", description="Predictors sampled per split"
    )
    min_samples_leaf: int = Field(default=5, ge=1, description="Minimum rows per leaf")


class GradientBoostingConfig(ModelConfigBase):
    """Gradient-boosted regression trees with squared-error loss.

    Attributes:
        n_estimators: Boosting rounds.
        max_depth: Maximum depth of each tree.
        learning_rate: Shrinkage per round.
        loss: Objective (squared error).
    """

    model_type: Literal["gradient_boosting"] = "gradient_boosting"
    n_estimators: int = Field(default=2000, ge=1, le=10000, description="Boosting rounds")
    max_depth: int = Field(default=4, ge=1, le=20, description="Maximum tree depth")
    learning_rate: float = Field(default=0.01, gt=0.0, le=1.0, description="Shrinkage")
    loss: Literal["squared_error"] = "squared_error"


class KnnConfig(ModelConfigBase):
    """k-nearest-neighbour regressor on standardized predictors.

    Attributes:
        n_neighbors: Neighbours averaged per prediction.
        scale: Standardize predictors before computing distances.
    """

    model_type: Literal["knn"] = "knn"
    n_neighbors: int = Field(default=10, ge=1, le=100, description="Neighbours per prediction")
    scale: bool = True


RegressionModelConfig = (
    LinearRegressionConfig | RandomForestConfig | GradientBoostingConfig | KnnConfig
)
