"""Model-family tags, fitted artifacts and the Trainable capability.

Every learner, time-series or regression, is a Trainable variant:
- fit(data) -> TrainedModel
- predict(model, inputs) -> np.ndarray

Banks iterate the registered variants uniformly and never branch on family.

CRITICAL: TrainedModel is never mutated after fitting. Refitting produces a
new instance, so fitted artifacts can be shared across requests without locks.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from datetime import date as date_type
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

from ppilab.core.exceptions import BadRequestError

if TYPE_CHECKING:
    from ppilab.features.data.models import Series


class ModelFamily(str, Enum):
    """Model family tag carried by every fitted artifact and evaluation."""

    ARIMA = "arima"
    ETS = "ets"
    LINEAR_REGRESSION = "linear_regression"
    RANDOM_FOREST = "random_forest"
    GRADIENT_BOOSTING = "gradient_boosting"
    KNN = "knn"

    @property
    def is_time_series(self) -> bool:
        """True for families fitted on a Series rather than a TabularDataset."""
        return self in (ModelFamily.ARIMA, ModelFamily.ETS)


@dataclass(frozen=True, eq=False)
class TrainedModel:
    """Opaque fitted estimator plus the exact inputs it was fitted on.

    Attributes:
        family: Model family tag.
        estimator: Library-specific fitted object (statsmodels results,
            scikit-learn estimator, ...).
        target: Target column / series name.
        predictors: Predictor columns in input order (empty for time series).
        training_rows: Row positions of the training partition.
        training_series: Full history for time-series families.
        params: Selected hyperparameters (e.g. chosen ARIMA order).
        config_hash: Hash of the configuration used for fitting.
        fitted_at: UTC timestamp of the fit.
    """

    family: ModelFamily
    estimator: Any
    target: str
    predictors: tuple[str, ...] = ()
    training_rows: tuple[int, ...] = ()
    training_series: Series | None = None
    params: dict[str, Any] = field(default_factory=lambda: {})
    config_hash: str = ""
    fitted_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True, eq=False)
class Forecast:
    """Point forecast with interval bounds over ``horizon`` future months.

    Attributes:
        dates: Month-start dates of each forecast step.
        point: Point estimates.
        lower: Lower interval bound per step.
        upper: Upper interval bound per step.
        level: Interval coverage (e.g. 0.95).
    """

    dates: tuple[date_type, ...]
    point: np.ndarray[Any, np.dtype[np.floating[Any]]]
    lower: np.ndarray[Any, np.dtype[np.floating[Any]]]
    upper: np.ndarray[Any, np.dtype[np.floating[Any]]]
    level: float = 0.95

    def __post_init__(self) -> None:
        """Validate shapes and freeze buffers."""
        n = len(self.point)
        if n < 1:
            raise ValueError("Forecast horizon must be at least 1")
        if not (len(self.lower) == len(self.upper) == len(self.dates) == n):
            raise ValueError(
                f"Forecast length mismatch: point={n}, lower={len(self.lower)}, "
                f"upper={len(self.upper)}, dates={len(self.dates)}"
            )
        for name in ("point", "lower", "upper"):
            arr = np.array(getattr(self, name), dtype=np.float64)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)
        object.__setattr__(self, "dates", tuple(self.dates))

    @property
    def horizon(self) -> int:
        """Number of forecast steps."""
        return len(self.point)


class Trainable(ABC):
    """Capability shared by every model family.

    Subclasses set ``family`` and implement fit/predict for their input kind.
    """

    family: ClassVar[ModelFamily]

    @abstractmethod
    def fit(self, data: Any) -> TrainedModel:  # noqa: ANN401
        """Fit on training data and return a new TrainedModel.

        Raises:
            ModelFitFailure: If the family cannot be fitted on ``data``.
        """

    @abstractmethod
    def predict(
        self, model: TrainedModel, inputs: Any  # noqa: ANN401
    ) -> np.ndarray[Any, np.dtype[np.floating[Any]]]:
        """Predict with a previously fitted model.

        Args:
            model: Artifact returned by ``fit`` of the same family.
            inputs: Horizon (time series) or predictor frame (regression).

        Returns:
            1D array of predictions.
        """

    def _check_family(self, model: TrainedModel) -> None:
        if model.family is not self.family:
            raise BadRequestError(
                f"{type(self).__name__} cannot use a '{model.family.value}' model",
                details={"expected": self.family.value, "got": model.family.value},
            )
