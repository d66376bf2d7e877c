"""Generic model bank: fit every registered family, isolate failures.

A bank owns an ordered list of Trainable variants. Registration order is the
tie-break priority for selection. Families have no data dependency on each
other, so they may be fitted in parallel with joblib; results are collected
back in registration order, so parallelism is not observable.

CRITICAL: A ModelFitFailure in one family never aborts its siblings.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import structlog
from joblib import Parallel, delayed  # type: ignore[import-untyped]

from ppilab.core.exceptions import EmptyModelBank, ModelFitFailure
from ppilab.core.logging import log_duration
from ppilab.features.evaluation.metrics import MetricEvaluator
from ppilab.features.evaluation.results import EvaluationResult
from ppilab.features.evaluation.selection import ModelSelector
from ppilab.shared.models import ModelFamily, Trainable, TrainedModel

logger = structlog.get_logger()

MemberT = TypeVar("MemberT", bound=Trainable)


@dataclass(frozen=True, eq=False)
class BankResult:
    """Outcome of fitting one bank.

    Attributes:
        name: Bank name.
        results: Evaluations of surviving families, in registration order.
        models: Fitted artifacts of surviving families.
        failures: Failure reason per dropped family.
    """

    name: str
    results: tuple[EvaluationResult, ...]
    models: dict[ModelFamily, TrainedModel] = field(default_factory=lambda: {})
    failures: dict[ModelFamily, str] = field(default_factory=lambda: {})

    def select(self, selector: ModelSelector | None = None) -> EvaluationResult:
        """Winning evaluation of this bank.

        Raises:
            EmptyModelBank: If every family failed.
        """
        if not self.results:
            raise EmptyModelBank(self.name, {f.value: r for f, r in self.failures.items()})
        return (selector or ModelSelector(self.name)).select(self.results)

    def model_for(self, family: ModelFamily) -> TrainedModel:
        """Fitted artifact of ``family``.

        Raises:
            KeyError: If the family was not registered or failed to fit.
        """
        return self.models[family]

    def result_for(self, family: ModelFamily) -> EvaluationResult:
        """Evaluation of ``family``.

        Raises:
            KeyError: If the family was not registered or failed to fit.
        """
        for result in self.results:
            if result.family is family:
                return result
        raise KeyError(family)


class ModelBank(ABC, Generic[MemberT]):
    """Fit and evaluate a fixed, ordered set of model families.

    Attributes:
        name: Bank name used in log events and errors.
        members: Registered Trainable variants in priority order.
        n_jobs: joblib worker count (1 = sequential, -1 = all cores).
    """

    name: str = "bank"

    def __init__(
        self,
        members: Sequence[MemberT],
        n_jobs: int = 1,
        evaluator: MetricEvaluator | None = None,
    ) -> None:
        """Initialize the bank.

        Args:
            members: Trainable variants in registration order.
            n_jobs: Number of parallel fits.
            evaluator: Metric evaluator (default: a new MetricEvaluator).

        Raises:
            ValueError: If members is empty or registers a family twice.
        """
        families = [m.family for m in members]
        if not families:
            raise ValueError(f"Bank '{self.name}' needs at least one member")
        if len(set(families)) != len(families):
            raise ValueError(f"Bank '{self.name}' registers a family twice: {families}")
        self.members = list(members)
        self.n_jobs = n_jobs
        self.evaluator = evaluator or MetricEvaluator()

    @property
    def families(self) -> list[ModelFamily]:
        return [m.family for m in self.members]

    @abstractmethod
    def _fit_and_evaluate(
        self, member: MemberT, order: int, data: Any  # noqa: ANN401
    ) -> tuple[TrainedModel, EvaluationResult]:
        """Fit one member and score it.

        Raises:
            ModelFitFailure: If the member cannot be fitted or scored.
        """

    def _run_member(
        self, member: MemberT, order: int, data: Any  # noqa: ANN401
    ) -> tuple[ModelFamily, TrainedModel | None, EvaluationResult | None, str | None]:
        try:
            model, result = self._fit_and_evaluate(member, order, data)
        except ModelFitFailure as exc:
            return member.family, None, None, exc.reason
        return member.family, model, result, None

    def fit(self, data: Any) -> BankResult:  # noqa: ANN401
        """Fit every member on ``data``.

        Args:
            data: Training input shared by all members.

        Returns:
            BankResult with survivors and failures. May contain zero
            survivors; selection then raises EmptyModelBank.
        """
        with log_duration(
            logger, f"{self.name}.bank_fit", families=[f.value for f in self.families]
        ) as summary:
            outcomes = Parallel(n_jobs=self.n_jobs)(
                delayed(self._run_member)(member, order, data)
                for order, member in enumerate(self.members)
            )

            results: list[EvaluationResult] = []
            models: dict[ModelFamily, TrainedModel] = {}
            failures: dict[ModelFamily, str] = {}
            for family, model, result, reason in outcomes:
                if model is None or result is None:
                    reason = reason or "no result"
                    logger.warning(
                        f"{self.name}.family_fit_failed", family=family.value, reason=reason
                    )
                    failures[family] = reason
                    continue
                models[family] = model
                results.append(result)
                logger.info(
                    f"{self.name}.family_evaluated",
                    family=family.value,
                    **result.metrics.as_dict(),
                )

            summary["n_fitted"] = len(results)
            summary["n_failed"] = len(failures)

        return BankResult(
            name=self.name, results=tuple(results), models=models, failures=failures
        )
