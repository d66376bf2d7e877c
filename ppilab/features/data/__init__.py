"""Dataset value types and the cleaned-CSV adapter."""

from ppilab.features.data.loader import LoadedData, load_dataset, prepare_dataset
from ppilab.features.data.models import (
    Series,
    TabularDataset,
    TrainTestSplit,
    add_months,
    months_between,
)

__all__ = [
    "LoadedData",
    "Series",
    "TabularDataset",
    "TrainTestSplit",
    "add_months",
    "load_dataset",
    "months_between",
    "prepare_dataset",
]
