"""Threshold alerts over forecast point estimates."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

ALERT_MESSAGE = "Alert: Projected PPI exceeds threshold! Consider policy interventions."
NO_ALERT_MESSAGE = "No significant price volatility detected."


@dataclass(frozen=True)
class AlertState:
    """Binary alert derived from one forecast.

    Attributes:
        threshold: Value the forecast was compared against.
        triggered: Whether any point estimate exceeded the threshold.
        message: Human-readable outcome.
    """

    threshold: float
    triggered: bool
    message: str


class AlertEvaluator:
    """Stateless threshold check; recomputed for every new forecast."""

    def evaluate(self, points: Iterable[float], threshold: float) -> AlertState:
        """Trigger iff any point is strictly greater than ``threshold``.

        Args:
            points: Forecast point estimates.
            threshold: Alert threshold.

        Returns:
            AlertState with one of the two fixed messages.
        """
        triggered = any(float(p) > threshold for p in points)
        return AlertState(
            threshold=float(threshold),
            triggered=triggered,
            message=ALERT_MESSAGE if triggered else NO_ALERT_MESSAGE,
        )
