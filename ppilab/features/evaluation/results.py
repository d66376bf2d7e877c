"""Evaluation result shared by the time-series and regression banks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from ppilab.features.evaluation.metrics import Metrics
from ppilab.shared.models import Forecast, ModelFamily


@dataclass(frozen=True, eq=False)
class EvaluationResult:
    """Metrics and aligned predictions for one fitted model family.

    Attributes:
        family: Model family tag.
        metrics: Goodness-of-fit metrics over (actuals, predictions).
        actuals: Values the predictions are scored against.
        predictions: Predictions aligned to ``actuals``.
        registration_order: Position of the family in its bank; breaks ties.
        forecast: Fixed-horizon forecast (time-series families only).
    """

    family: ModelFamily
    metrics: Metrics
    actuals: np.ndarray[Any, np.dtype[np.floating[Any]]]
    predictions: np.ndarray[Any, np.dtype[np.floating[Any]]]
    registration_order: int
    forecast: Forecast | None = None

    def __post_init__(self) -> None:
        """Enforce prediction/actual alignment."""
        if len(self.predictions) != len(self.actuals):
            raise ValueError(
                f"Length mismatch: actuals={len(self.actuals)}, "
                f"predictions={len(self.predictions)}"
            )
