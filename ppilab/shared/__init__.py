"""Shared modeling types used across feature slices."""

from ppilab.shared.models import Forecast, ModelFamily, Trainable, TrainedModel

__all__ = [
    "Forecast",
    "ModelFamily",
    "Trainable",
    "TrainedModel",
]
