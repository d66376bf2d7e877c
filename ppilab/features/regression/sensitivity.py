"""Sensitivity of a fixed regression model to a shock in one predictor.

One predictor column of the test partition is scaled by (1 + pct / 100) and
the unchanged model is re-scored. This measures prediction drift under a
hypothetical input shock; the model is never retrained.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
import structlog

from ppilab.core.exceptions import ValidationError
from ppilab.features.regression.models import regressor_for
from ppilab.shared.models import TrainedModel

logger = structlog.get_logger()

FloatArray = np.ndarray[Any, np.dtype[np.floating[Any]]]


@dataclass(frozen=True, eq=False)
class SensitivityResult:
    """Actual target paired with predictions from perturbed inputs.

    Attributes:
        predictor: Perturbed predictor column.
        adjustment_pct: Percentage change applied (negative = decrease).
        actual: Test-partition target values.
        baseline: Predictions from the unperturbed inputs.
        predicted: Predictions from the perturbed inputs.
    """

    predictor: str
    adjustment_pct: float
    actual: FloatArray
    baseline: FloatArray
    predicted: FloatArray

    @property
    def mean_drift(self) -> float:
        """Average change in prediction caused by the perturbation."""
        return float(np.mean(self.predicted - self.baseline))

    def pairs(self) -> list[tuple[float, float]]:
        """(actual, perturbed prediction) pairs for plotting."""
        return [(float(a), float(p)) for a, p in zip(self.actual, self.predicted, strict=True)]


class SensitivityAnalyzer:
    """Re-score a fitted regression model under a one-column perturbation."""

    def analyze(
        self,
        model: TrainedModel,
        test: pd.DataFrame,
        predictor: str,
        adjustment_pct: float,
    ) -> SensitivityResult:
        """Scale ``predictor`` by (1 + adjustment_pct / 100) and predict.

        Args:
            model: Fitted regression artifact (never modified).
            test: Test partition with the model's predictors and target.
            predictor: Column to perturb; must be one of the model's predictors.
            adjustment_pct: Percentage change, e.g. 10 for +10%, -5 for -5%.

        Returns:
            SensitivityResult aligned to the rows of ``test``.

        Raises:
            ValidationError: If the predictor is not a model input or the
                target column is missing.
        """
        if predictor not in model.predictors:
            raise ValidationError(
                f"'{predictor}' is not a predictor of the {model.family.value} model",
                details={"predictor": predictor, "predictors": list(model.predictors)},
            )
        if model.target not in test.columns:
            raise ValidationError(f"Target column '{model.target}' not found in test data")

        regressor = regressor_for(model.family)
        perturbed = test.copy()
        perturbed[predictor] = perturbed[predictor] * (1.0 + adjustment_pct / 100.0)

        result = SensitivityResult(
            predictor=predictor,
            adjustment_pct=adjustment_pct,
            actual=test[model.target].to_numpy(dtype=np.float64, copy=True),
            baseline=regressor.predict(model, test),
            predicted=regressor.predict(model, perturbed),
        )

        logger.info(
            "regression.sensitivity_analyzed",
            family=model.family.value,
            predictor=predictor,
            adjustment_pct=adjustment_pct,
            mean_drift=result.mean_drift,
            n_rows=len(test),
        )
        return result
