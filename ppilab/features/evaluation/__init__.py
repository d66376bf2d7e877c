"""Metric evaluation, model banks and model selection."""

from ppilab.features.evaluation.bank import BankResult, ModelBank
from ppilab.features.evaluation.metrics import MetricEvaluator, Metrics
from ppilab.features.evaluation.results import EvaluationResult
from ppilab.features.evaluation.selection import ModelSelector

__all__ = [
    "BankResult",
    "EvaluationResult",
    "MetricEvaluator",
    "Metrics",
    "ModelBank",
    "ModelSelector",
]
