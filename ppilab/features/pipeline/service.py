"""Once-per-run training pipeline.

Flow:
    Series ──► TimeSeriesModelBank ──► ModelSelector ──► best time-series model
    TabularDataset ──► split ──► FeatureSelector ──► reduced split
        ──► RegressionModelBank ──► ModelSelector ──► best regression model

The resulting FittedModels bundle is built once, then only read by every
scenario request of the run.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pandas as pd
import structlog

from ppilab.core.config import Settings, get_settings
from ppilab.core.logging import log_duration, run_id_ctx
from ppilab.features.data.loader import LoadedData
from ppilab.features.data.models import Series
from ppilab.features.evaluation.bank import BankResult
from ppilab.features.evaluation.results import EvaluationResult
from ppilab.features.forecasting.bank import TimeSeriesModelBank
from ppilab.features.forecasting.models import model_factory
from ppilab.features.forecasting.schemas import ArimaModelConfig, EtsModelConfig
from ppilab.features.regression.bank import RegressionModelBank
from ppilab.features.regression.features import FeatureRanking, FeatureSelector
from ppilab.shared.models import ModelFamily, TrainedModel

logger = structlog.get_logger()


@dataclass(frozen=True, eq=False)
class FittedModels:
    """Read-only models shared by every scenario request of a run.

    Attributes:
        time_series_model: Model used for dynamic forecasts.
        regression_model: Model used for sensitivity analysis.
        regression_test: Test partition the regression bank was scored on.
    """

    time_series_model: TrainedModel
    regression_model: TrainedModel
    regression_test: pd.DataFrame

    @property
    def history(self) -> Series:
        history = self.time_series_model.training_series
        if history is None:
            raise ValueError("Time-series model was fitted without a training series")
        return history


@dataclass(frozen=True, eq=False)
class PipelineResult:
    """Everything one training run produced.

    Attributes:
        run_id: Identifier bound into the run's log events.
        fitted: Models reused by scenario requests.
        forecasting: Time-series bank outcome.
        regression: Regression bank outcome.
        ranking: Predictor importance ranking.
        selected_predictors: Predictors every regression family used.
        best_time_series: Winning time-series evaluation.
        best_regression: Winning regression evaluation.
        created_at: UTC completion time.
    """

    run_id: str
    fitted: FittedModels
    forecasting: BankResult
    regression: BankResult
    ranking: FeatureRanking
    selected_predictors: tuple[str, ...]
    best_time_series: EvaluationResult
    best_regression: EvaluationResult
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class TrainingPipeline:
    """Fit, evaluate and select the models of one run.

    Attributes:
        settings: Application settings.
        time_series_bank: Bank fitted on the Series.
        regression_bank: Bank fitted on the reduced split.
        feature_selector: Ranks predictors before the regression bank.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        time_series_bank: TimeSeriesModelBank | None = None,
        regression_bank: RegressionModelBank | None = None,
        feature_selector: FeatureSelector | None = None,
    ) -> None:
        """Initialize the pipeline; unspecified parts are built from settings."""
        self.settings = settings or get_settings()
        s = self.settings
        self.time_series_bank = time_series_bank or TimeSeriesModelBank(
            members=[
                model_factory(
                    ArimaModelConfig(max_p=s.arima_max_p, max_d=s.arima_max_d, max_q=s.arima_max_q)
                ),
                model_factory(EtsModelConfig(seasonal_periods=s.ets_seasonal_periods)),
            ],
            horizon=s.forecast_fixed_horizon,
            level=s.forecast_confidence_level,
            n_jobs=s.bank_n_jobs,
        )
        self.regression_bank = regression_bank or RegressionModelBank(
            random_state=s.random_seed, n_jobs=s.bank_n_jobs
        )
        self.feature_selector = feature_selector or FeatureSelector(
            n_estimators=s.feature_selector_n_estimators,
            max_features=s.feature_selector_max_features,
            random_state=s.random_seed,
        )

    def _sensitivity_model(self, regression: BankResult, winner: EvaluationResult) -> TrainedModel:
        designated = self.settings.sensitivity_model_family
        if designated:
            family = ModelFamily(designated)
            if family in regression.models:
                return regression.model_for(family)
            logger.warning(
                "pipeline.sensitivity_model_unavailable",
                designated=designated,
                fallback=winner.family.value,
            )
        return regression.model_for(winner.family)

    def run(self, data: LoadedData) -> PipelineResult:
        """Run both banks and select their winners.

        Args:
            data: Cleaned Series and TabularDataset.

        Returns:
            PipelineResult holding the FittedModels bundle.

        Raises:
            EmptyModelBank: If every family of a bank failed.
            ValidationError: If the dataset cannot be split or has fewer
                predictors than the selection size.
        """
        run_id = uuid.uuid4().hex[:12]
        token = run_id_ctx.set(run_id)
        try:
            with log_duration(logger, "pipeline.run", n_months=len(data.series)) as summary:
                forecasting = self.time_series_bank.fit(data.series)
                best_time_series = forecasting.select()

                split = data.dataset.split(
                    test_size=self.settings.test_size, random_state=self.settings.random_seed
                )
                ranking, selected = self.feature_selector.select(
                    split, self.settings.feature_selection_size
                )
                reduced = split.restrict(selected)

                regression = self.regression_bank.fit(reduced)
                best_regression = regression.select()

                fitted = FittedModels(
                    time_series_model=forecasting.model_for(best_time_series.family),
                    regression_model=self._sensitivity_model(regression, best_regression),
                    regression_test=reduced.test.copy(),
                )
                summary.update(
                    best_time_series=best_time_series.family.value,
                    best_regression=best_regression.family.value,
                    sensitivity_model=fitted.regression_model.family.value,
                    selected_predictors=list(selected),
                )
        finally:
            run_id_ctx.reset(token)

        return PipelineResult(
            run_id=run_id,
            fitted=fitted,
            forecasting=forecasting,
            regression=regression,
            ranking=ranking,
            selected_predictors=selected,
            best_time_series=best_time_series,
            best_regression=best_regression,
        )
