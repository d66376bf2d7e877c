"""Regression model bank with genuine held-out evaluation.

Every family is trained on the same train partition and scored on the same
test partition, restricted to the same selected predictors.
"""

from __future__ import annotations

from collections.abc import Sequence

from ppilab.core.exceptions import ModelFitFailure
from ppilab.features.data.models import TrainTestSplit
from ppilab.features.evaluation.bank import ModelBank
from ppilab.features.evaluation.metrics import MetricEvaluator
from ppilab.features.evaluation.results import EvaluationResult
from ppilab.features.regression.models import Regressor, default_regressors
from ppilab.shared.models import TrainedModel


class RegressionModelBank(ModelBank[Regressor]):
    """Fit linear, random forest, gradient boosting and k-NN regressors."""

    name = "regression"

    def __init__(
        self,
        members: Sequence[Regressor] | None = None,
        random_state: int = 42,
        n_jobs: int = 1,
        evaluator: MetricEvaluator | None = None,
    ) -> None:
        """Initialize the bank.

        Args:
            members: Regressors in priority order (default: the fixed set).
            random_state: Seed for the default members.
            n_jobs: Number of parallel fits.
            evaluator: Metric evaluator.
        """
        super().__init__(
            members if members is not None else default_regressors(random_state),
            n_jobs=n_jobs,
            evaluator=evaluator,
        )

    def _fit_and_evaluate(
        self, member: Regressor, order: int, data: TrainTestSplit
    ) -> tuple[TrainedModel, EvaluationResult]:
        model = member.fit(data)
        try:
            predictions = member.predict(model, data.X_test)
        except ValueError as exc:
            raise ModelFitFailure(member.family.value, f"prediction failed: {exc}") from exc

        actuals = data.y_test
        return model, EvaluationResult(
            family=member.family,
            metrics=self.evaluator.evaluate(actuals, predictions),
            actuals=actuals,
            predictions=predictions,
            registration_order=order,
        )
