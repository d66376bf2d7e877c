"""Predictor ranking from a random forest fitted on every predictor.

The ranking is computed once per run and the selected prefix is applied to
every regression family, so all families compare on the same inputs.
Importance scores are unitless and only meaningful within one ranking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np
import structlog
from sklearn.ensemble import RandomForestRegressor  # type: ignore[import-untyped]
from sklearn.inspection import permutation_importance  # type: ignore[import-untyped]

from ppilab.core.exceptions import ValidationError
from ppilab.features.data.models import TrainTestSplit

logger = structlog.get_logger()


@dataclass(frozen=True)
class FeatureRanking:
    """Predictors ordered by descending importance.

    Attributes:
        scores: (predictor, importance) pairs, most influential first.
        method: How importances were measured.
    """

    scores: tuple[tuple[str, float], ...]
    method: str = "impurity"

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.scores)

    def as_dict(self) -> dict[str, float]:
        return dict(self.scores)

    def top(self, k: int) -> tuple[str, ...]:
        """The ``k`` most influential predictors.

        Raises:
            ValidationError: If k is not in [1, number of predictors].
        """
        if not 1 <= k <= len(self.scores):
            raise ValidationError(
                f"Cannot select {k} of {len(self.scores)} predictors",
                details={"k": k, "available": list(self.names)},
            )
        return self.names[:k]


class FeatureSelector:
    """Rank predictors with a fixed-size random forest.

    Attributes:
        n_estimators: Tree count.
        max_features: Predictors sampled per split.
        importance: "impurity" (mean decrease in impurity) or "permutation".
        random_state: Seed for the forest (and permutations).
    """

    def __init__(
        self,
        n_estimators: int = 500,
        max_features: Literal["sqrt", "log2"] | float = "sqrt",
        importance: Literal["impurity", "permutation"] = "impurity",
        random_state: int = 42,
    ) -> None:
        self.n_estimators = n_estimators
        self.max_features = max_features
        self.importance = importance
        self.random_state = random_state

    def rank(self, split: TrainTestSplit) -> FeatureRanking:
        """Fit on the train partition with all predictors and rank them.

        Args:
            split: Split carrying every available predictor.

        Returns:
            FeatureRanking; ties keep the original column order.
        """
        forest = RandomForestRegressor(
            n_estimators=self.n_estimators,
            max_features=self.max_features,
            random_state=self.random_state,
            n_jobs=1,
        )
        X_train, y_train = split.X_train, split.y_train  # noqa: N806
        forest.fit(X_train, y_train)

        if self.importance == "permutation":
            scores = permutation_importance(
                forest, X_train, y_train, n_repeats=10, random_state=self.random_state
            ).importances_mean
        else:
            scores = forest.feature_importances_

        scores = np.asarray(scores, dtype=np.float64)
        order = sorted(range(len(split.predictors)), key=lambda i: (-scores[i], i))
        ranking = FeatureRanking(
            scores=tuple((split.predictors[i], float(scores[i])) for i in order),
            method=self.importance,
        )

        logger.info(
            "regression.features_ranked",
            method=self.importance,
            ranking=ranking.as_dict(),
        )
        return ranking

    def select(self, split: TrainTestSplit, k: int) -> tuple[FeatureRanking, tuple[str, ...]]:
        """Rank predictors and keep the top ``k``.

        Returns:
            Tuple of (ranking, selected predictor names).
        """
        ranking = self.rank(split)
        return ranking, ranking.top(k)
