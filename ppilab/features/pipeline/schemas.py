"""Response schemas describing a training run."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ppilab.features.evaluation.bank import BankResult
from ppilab.features.evaluation.results import EvaluationResult


class FamilyMetricsResponse(BaseModel):
    """Evaluation metrics of one model family.

    Undefined metrics (e.g. MAPE with a zero actual) are null and explained
    in ``warnings``.
    """

    model_type: str
    rmse: float | None
    mae: float | None
    mape: float | None
    r2: float | None
    n_samples: int
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: EvaluationResult) -> FamilyMetricsResponse:
        return cls(
            model_type=result.family.value,
            n_samples=result.metrics.n_samples,
            warnings=list(result.metrics.warnings),
            **result.metrics.as_dict(),
        )


class BankSummaryResponse(BaseModel):
    """Evaluations, winner and failures of one bank."""

    name: str
    winner: str
    results: list[FamilyMetricsResponse]
    failures: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_bank(cls, bank: BankResult, winner: EvaluationResult) -> BankSummaryResponse:
        return cls(
            name=bank.name,
            winner=winner.family.value,
            results=[FamilyMetricsResponse.from_result(r) for r in bank.results],
            failures={family.value: reason for family, reason in bank.failures.items()},
        )


class ModelSummaryResponse(BaseModel):
    """Summary of the run behind the loaded models.

    Attributes:
        run_id: Training run identifier.
        created_at: When the run completed.
        time_series: Time-series bank summary (scored in-sample).
        regression: Regression bank summary (scored on the test partition).
        feature_ranking: Importance per predictor, most influential first.
        selected_predictors: Predictors used by every regression family.
        sensitivity_model: Regression family used for sensitivity analysis.
    """

    run_id: str
    created_at: datetime
    time_series: BankSummaryResponse
    regression: BankSummaryResponse
    feature_ranking: dict[str, float]
    selected_predictors: list[str]
    sensitivity_model: str
