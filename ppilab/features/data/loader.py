"""Adapter from a cleaned CSV export to Series + TabularDataset.

The upstream cleaning job owns parsing rules; this module only enforces the
input contract: one monthly timestamp column, numeric indicator columns, and
no rows whose target is missing or non-numeric.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
from pathlib import Path

import numpy as np
import pandas as pd
import structlog

from ppilab.core.exceptions import ValidationError
from ppilab.features.data.models import Series, TabularDataset

logger = structlog.get_logger()


@dataclass(frozen=True, eq=False)
class LoadedData:
    """Both views of one cleaned dataset.

    Attributes:
        series: Target column as a monthly time series.
        dataset: Target plus predictor columns for cross-sectional regression.
    """

    series: Series
    dataset: TabularDataset


def prepare_dataset(
    frame: pd.DataFrame,
    timestamp_column: str,
    target_column: str,
) -> LoadedData:
    """Build Series and TabularDataset views from a raw frame.

    Args:
        frame: Raw tabular data.
        timestamp_column: Column parseable to year+month.
        target_column: Column to model.

    Returns:
        LoadedData with both views.

    Raises:
        ValidationError: If required columns are missing or the cleaned
            target has duplicate months or gaps.
    """
    for column in (timestamp_column, target_column):
        if column not in frame.columns:
            raise ValidationError(f"Column '{column}' not found in dataset")

    data = frame.copy()
    data[timestamp_column] = pd.to_datetime(data[timestamp_column], errors="coerce")
    data[target_column] = pd.to_numeric(data[target_column], errors="coerce")

    n_raw = len(data)
    data = data.dropna(subset=[timestamp_column, target_column])
    n_dropped = n_raw - len(data)
    if n_dropped:
        logger.info("data.rows_excluded", reason="missing_target_or_timestamp", n_rows=n_dropped)

    predictor_columns: list[str] = []
    for column in data.columns:
        if column in (timestamp_column, target_column):
            continue
        coerced = pd.to_numeric(data[column], errors="coerce")
        if coerced.notna().any():
            data[column] = coerced
            predictor_columns.append(str(column))

    data = data.sort_values(timestamp_column).reset_index(drop=True)
    months = data[timestamp_column].dt.to_period("M")
    if months.duplicated().any():
        duplicates = sorted({str(m) for m in months[months.duplicated()]})
        raise ValidationError(
            "Dataset contains duplicate months", details={"months": duplicates[:10]}
        )

    series = Series(
        dates=tuple(date_type(p.year, p.month, 1) for p in months),
        values=data[target_column].to_numpy(dtype=np.float64),
        name=target_column,
    )

    tabular = data.loc[:, [*predictor_columns, target_column]].dropna()
    if len(tabular) < len(data):
        logger.info(
            "data.rows_excluded",
            reason="missing_predictor",
            n_rows=len(data) - len(tabular),
        )
    dataset = TabularDataset(
        frame=tabular, target=target_column, predictors=tuple(predictor_columns)
    )

    logger.info(
        "data.dataset_prepared",
        n_months=len(series),
        start=str(series.start),
        end=str(series.end),
        n_rows=dataset.n_rows,
        predictors=list(dataset.predictors),
        target=target_column,
    )
    return LoadedData(series=series, dataset=dataset)


def load_dataset(
    path: str | Path,
    timestamp_column: str,
    target_column: str,
) -> LoadedData:
    """Read a cleaned CSV and build both dataset views.

    Args:
        path: CSV file path.
        timestamp_column: Column parseable to year+month.
        target_column: Column to model.

    Returns:
        LoadedData with both views.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValidationError: If the contents violate the input contract.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")
    logger.info("data.load_started", path=str(path))
    return prepare_dataset(pd.read_csv(path), timestamp_column, target_column)
