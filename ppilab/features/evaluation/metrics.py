"""Metric evaluator for model comparison.

Supported Metrics:
- RMSE: Root Mean Squared Error
- MAE: Mean Absolute Error
- MAPE: Mean Absolute Percentage Error (0-100+ scale)
- R²: Coefficient of determination

CRITICAL: Undefined metrics are never computed with an epsilon fallback.
Individual metric methods raise DegenerateMetric / DivisionByZero; evaluate()
records those as NaN plus a warning so one undefined metric does not sink
the whole evaluation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from ppilab.core.exceptions import DegenerateMetric, DivisionByZero

FloatArray = np.ndarray[Any, np.dtype[np.floating[Any]]]


@dataclass(frozen=True)
class Metrics:
    """Goodness-of-fit summary for one (actual, predicted) pair.

    Attributes:
        rmse: Root mean squared error.
        mae: Mean absolute error.
        mape: Mean absolute percentage error, NaN when undefined.
        r2: Coefficient of determination, NaN when undefined.
        n_samples: Number of aligned observations.
        warnings: Reasons for any undefined metric.
    """

    rmse: float
    mae: float
    mape: float
    r2: float
    n_samples: int
    warnings: tuple[str, ...] = field(default=())

    def is_defined(self, name: str) -> bool:
        """Whether the named metric has a finite value."""
        return not math.isnan(getattr(self, name))

    def as_dict(self) -> dict[str, float | None]:
        """Metric values with undefined entries mapped to None (JSON-safe)."""
        return {
            name: (None if math.isnan(value) else value)
            for name, value in (
                ("rmse", self.rmse),
                ("mae", self.mae),
                ("mape", self.mape),
                ("r2", self.r2),
            )
        }


class MetricEvaluator:
    """Stateless calculator for RMSE, MAE, MAPE and R²."""

    @staticmethod
    def _validate(actual: FloatArray, predicted: FloatArray) -> tuple[FloatArray, FloatArray]:
        actual = np.asarray(actual, dtype=np.float64)
        predicted = np.asarray(predicted, dtype=np.float64)
        if len(actual) != len(predicted):
            raise ValueError(
                f"Length mismatch: actual={len(actual)}, predicted={len(predicted)}"
            )
        if len(actual) == 0:
            raise ValueError("Cannot evaluate metrics on empty arrays")
        return actual, predicted

    @staticmethod
    def rmse(actual: FloatArray, predicted: FloatArray) -> float:
        """Root Mean Squared Error.

        Formula: sqrt(mean((actual - predicted)^2))
        """
        actual, predicted = MetricEvaluator._validate(actual, predicted)
        return float(np.sqrt(np.mean((actual - predicted) ** 2)))

    @staticmethod
    def mae(actual: FloatArray, predicted: FloatArray) -> float:
        """Mean Absolute Error.

        Formula: mean(|actual - predicted|)
        """
        actual, predicted = MetricEvaluator._validate(actual, predicted)
        return float(np.mean(np.abs(actual - predicted)))

    @staticmethod
    def mape(actual: FloatArray, predicted: FloatArray) -> float:
        """Mean Absolute Percentage Error.

        Formula: mean(|(actual - predicted) / actual|) * 100

        Raises:
            DivisionByZero: If any actual value is exactly zero.
        """
        actual, predicted = MetricEvaluator._validate(actual, predicted)
        n_zeros = int(np.sum(actual == 0))
        if n_zeros:
            raise DivisionByZero("mape", n_zeros)
        return float(np.mean(np.abs((actual - predicted) / actual)) * 100.0)

    @staticmethod
    def r2(actual: FloatArray, predicted: FloatArray) -> float:
        """Coefficient of determination.

        Formula: 1 - SS_res / SS_tot, with SS_tot around mean(actual).

        Raises:
            DegenerateMetric: If actual is constant (SS_tot == 0).
        """
        actual, predicted = MetricEvaluator._validate(actual, predicted)
        ss_tot = float(np.sum((actual - np.mean(actual)) ** 2))
        if ss_tot == 0.0:
            raise DegenerateMetric("r2", "actual values are constant")
        ss_res = float(np.sum((actual - predicted) ** 2))
        return 1.0 - ss_res / ss_tot

    def evaluate(self, actual: FloatArray, predicted: FloatArray) -> Metrics:
        """Compute all metrics, flagging undefined ones instead of raising.

        Args:
            actual: Ground truth values.
            predicted: Predicted values, aligned with ``actual``.

        Returns:
            Metrics with NaN for undefined MAPE / R² and a warning per NaN.

        Raises:
            ValueError: If arrays are empty or have different lengths.
        """
        actual, predicted = self._validate(actual, predicted)
        warnings: list[str] = []

        try:
            mape_value = self.mape(actual, predicted)
        except DegenerateMetric as exc:
            warnings.append(exc.message)
            mape_value = math.nan

        try:
            r2_value = self.r2(actual, predicted)
        except DegenerateMetric as exc:
            warnings.append(exc.message)
            r2_value = math.nan

        return Metrics(
            rmse=self.rmse(actual, predicted),
            mae=self.mae(actual, predicted),
            mape=mape_value,
            r2=r2_value,
            n_samples=len(actual),
            warnings=tuple(warnings),
        )
