"""Best-model selection over a bank of evaluation results."""

from __future__ import annotations

import math
from collections.abc import Sequence

import structlog

from ppilab.core.exceptions import EmptyModelBank
from ppilab.features.evaluation.results import EvaluationResult

logger = structlog.get_logger()


class ModelSelector:
    """Pick the result with the lowest RMSE.

    Ties (exact float equality) go to the family registered first in the
    bank, so repeated runs over the same results always agree. Results with
    a non-finite RMSE are not eligible.
    """

    def __init__(self, bank: str = "bank") -> None:
        """Initialize the selector.

        Args:
            bank: Bank name used in errors and log events.
        """
        self.bank = bank

    def select(self, results: Sequence[EvaluationResult]) -> EvaluationResult:
        """Return the winning result.

        Args:
            results: Evaluations sharing one metric basis.

        Returns:
            The result with minimum RMSE.

        Raises:
            EmptyModelBank: If no eligible result is given.
        """
        eligible = [r for r in results if math.isfinite(r.metrics.rmse)]
        if not eligible:
            raise EmptyModelBank(self.bank)

        best = min(eligible, key=lambda r: (r.metrics.rmse, r.registration_order))

        logger.info(
            "evaluation.model_selected",
            bank=self.bank,
            family=best.family.value,
            rmse=best.metrics.rmse,
            n_candidates=len(eligible),
        )
        return best
