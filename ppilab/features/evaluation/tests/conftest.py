"""Test fixtures for evaluation module."""

from typing import Any

import numpy as np
import pytest

from ppilab.core.exceptions import ModelFitFailure
from ppilab.features.evaluation.bank import ModelBank
from ppilab.features.evaluation.metrics import MetricEvaluator, Metrics
from ppilab.features.evaluation.results import EvaluationResult
from ppilab.shared.models import ModelFamily, Trainable, TrainedModel


def make_result(family: ModelFamily, rmse: float, order: int) -> EvaluationResult:
    """EvaluationResult with a given RMSE and registration order."""
    return EvaluationResult(
        family=family,
        metrics=Metrics(rmse=rmse, mae=rmse, mape=1.0, r2=0.5, n_samples=3),
        actuals=np.array([1.0, 2.0, 3.0]),
        predictions=np.array([1.0, 2.0, 3.0]),
        registration_order=order,
    )


class OffsetModel(Trainable):
    """Predicts the actuals shifted by a fixed offset."""

    def __init__(self, family: ModelFamily, offset: float) -> None:
        self.family = family  # type: ignore[misc]
        self.offset = offset

    def fit(self, data: Any) -> TrainedModel:
        return TrainedModel(family=self.family, estimator=self.offset, target="y")

    def predict(self, model: TrainedModel, inputs: Any) -> np.ndarray:
        return np.asarray(inputs, dtype=np.float64) + model.estimator


class FailingModel(Trainable):
    """Always fails to fit."""

    def __init__(self, family: ModelFamily) -> None:
        self.family = family  # type: ignore[misc]

    def fit(self, data: Any) -> TrainedModel:
        raise ModelFitFailure(self.family.value, "optimizer did not converge")

    def predict(self, model: TrainedModel, inputs: Any) -> np.ndarray:
        raise AssertionError("never fitted")


class InSampleBank(ModelBank[Trainable]):
    """Scores each member against the training array itself."""

    name = "demo"

    def _fit_and_evaluate(
        self, member: Trainable, order: int, data: np.ndarray
    ) -> tuple[TrainedModel, EvaluationResult]:
        model = member.fit(data)
        predictions = member.predict(model, data)
        return model, EvaluationResult(
            family=member.family,
            metrics=self.evaluator.evaluate(data, predictions),
            actuals=np.asarray(data, dtype=np.float64),
            predictions=predictions,
            registration_order=order,
        )


@pytest.fixture
def evaluator() -> MetricEvaluator:
    return MetricEvaluator()


@pytest.fixture
def training_values() -> np.ndarray:
    """Strictly positive, non-constant values."""
    return np.array([10.0, 12.0, 15.0, 11.0, 14.0])


@pytest.fixture
def result_factory():
    """Factory for EvaluationResult with a given RMSE and order."""
    return make_result


@pytest.fixture
def offset_model():
    """Factory for members that predict with a fixed offset."""
    return OffsetModel


@pytest.fixture
def failing_model():
    """Factory for members that always fail to fit."""
    return FailingModel


@pytest.fixture
def in_sample_bank():
    """Bank class that scores members on their training data."""
    return InSampleBank
