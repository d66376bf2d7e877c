"""Immutable value types for the cleaned dataset.

- Series: monthly (date, value) pairs without gaps.
- TabularDataset: aligned numeric columns with one designated target.
- TrainTestSplit: disjoint, deterministic train/test partitions.

CRITICAL: These objects are never mutated after construction. Accessors hand
out copies so downstream fits cannot leak changes back into the run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as date_type
from typing import Any

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from ppilab.core.exceptions import ValidationError


def add_months(start: date_type, months: int) -> date_type:
    """Return the first day of the month ``months`` after ``start``'s month."""
    total = start.year * 12 + (start.month - 1) + months
    return date_type(total // 12, total % 12 + 1, 1)


def months_between(start: date_type, end: date_type) -> int:
    """Whole calendar months from ``start``'s month to ``end``'s month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


@dataclass(frozen=True, eq=False)
class Series:
    """Monthly time series with no gaps.

    Attributes:
        dates: First-of-month dates, strictly consecutive.
        values: Observed values (read-only array).
        name: Series label, usually the target column name.
    """

    dates: tuple[date_type, ...]
    values: np.ndarray[Any, np.dtype[np.floating[Any]]]
    name: str = "value"

    def __post_init__(self) -> None:
        """Validate cadence and freeze the value buffer."""
        if len(self.dates) == 0:
            raise ValidationError("Series must contain at least one observation")
        if len(self.dates) != len(self.values):
            raise ValidationError(
                f"Length mismatch: dates={len(self.dates)}, values={len(self.values)}"
            )

        values = np.array(self.values, dtype=np.float64)
        if not np.all(np.isfinite(values)):
            raise ValidationError("Series values must be finite")

        dates = tuple(date_type(d.year, d.month, 1) for d in self.dates)
        for prev, curr in zip(dates, dates[1:], strict=False):
            if months_between(prev, curr) != 1:
                raise ValidationError(
                    f"Series must be monthly without gaps: {prev} is followed by {curr}",
                    details={"previous": str(prev), "next": str(curr)},
                )

        values.setflags(write=False)
        object.__setattr__(self, "dates", dates)
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return len(self.dates)

    @property
    def start(self) -> date_type:
        """First observed month."""
        return self.dates[0]

    @property
    def end(self) -> date_type:
        """Last observed month."""
        return self.dates[-1]

    def tail(self, n: int) -> Series:
        """Last ``n`` observations, clamped to the series length."""
        n = max(1, min(n, len(self)))
        return Series(dates=self.dates[-n:], values=self.values[-n:], name=self.name)

    def to_pandas(self) -> pd.Series:
        """Convert to a pandas Series indexed by month-start timestamps."""
        index = pd.DatetimeIndex(pd.to_datetime(list(self.dates)), freq="MS")
        return pd.Series(np.array(self.values), index=index, name=self.name)

    @classmethod
    def from_pandas(cls, series: pd.Series) -> Series:
        """Build from a pandas Series indexed by anything date-like."""
        index = pd.to_datetime(series.index)
        dates = tuple(date_type(ts.year, ts.month, 1) for ts in index)
        return cls(dates=dates, values=series.to_numpy(dtype=np.float64), name=str(series.name))


@dataclass(frozen=True, eq=False)
class TrainTestSplit:
    """Disjoint train/test partitions over the same columns.

    Row labels of both frames are the row positions in the originating
    TabularDataset, so a fitted model can record exactly which rows it saw.

    Attributes:
        train: Training rows (predictors + target).
        test: Held-out rows (predictors + target).
        target: Target column name.
        predictors: Predictor column names, in model input order.
    """

    train: pd.DataFrame
    test: pd.DataFrame
    target: str
    predictors: tuple[str, ...]

    def __post_init__(self) -> None:
        """Reject overlapping partitions."""
        overlap = set(self.train.index) & set(self.test.index)
        if overlap:
            raise ValidationError(
                f"Train and test partitions share {len(overlap)} row(s)",
                details={"rows": sorted(int(i) for i in overlap)[:10]},
            )

    @property
    def X_train(self) -> pd.DataFrame:  # noqa: N802
        return self.train.loc[:, list(self.predictors)].copy()

    @property
    def y_train(self) -> np.ndarray[Any, np.dtype[np.floating[Any]]]:
        return self.train[self.target].to_numpy(dtype=np.float64, copy=True)

    @property
    def X_test(self) -> pd.DataFrame:  # noqa: N802
        return self.test.loc[:, list(self.predictors)].copy()

    @property
    def y_test(self) -> np.ndarray[Any, np.dtype[np.floating[Any]]]:
        return self.test[self.target].to_numpy(dtype=np.float64, copy=True)

    @property
    def train_rows(self) -> tuple[int, ...]:
        return tuple(int(i) for i in self.train.index)

    def restrict(self, predictors: tuple[str, ...] | list[str]) -> TrainTestSplit:
        """Same rows, fewer predictor columns.

        Args:
            predictors: Subset of the current predictors, in the desired order.

        Returns:
            New split sharing the exact row partition of this one.

        Raises:
            ValidationError: If a predictor is not part of this split.
        """
        predictors = tuple(predictors)
        unknown = [p for p in predictors if p not in self.predictors]
        if unknown:
            raise ValidationError(f"Unknown predictors: {unknown}", details={"unknown": unknown})
        columns = [*predictors, self.target]
        return TrainTestSplit(
            train=self.train.loc[:, columns].copy(),
            test=self.test.loc[:, columns].copy(),
            target=self.target,
            predictors=predictors,
        )


@dataclass(frozen=True, eq=False)
class TabularDataset:
    """Aligned numeric columns with one designated target.

    Attributes:
        frame: Numeric columns only; index is reset to row positions.
        target: Target column name.
        predictors: Predictor columns (defaults to every non-target column).
    """

    frame: pd.DataFrame
    target: str
    predictors: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        """Validate columns and take a private copy of the frame."""
        if self.target not in self.frame.columns:
            raise ValidationError(f"Target column '{self.target}' not found")

        predictors = self.predictors or tuple(
            str(c) for c in self.frame.columns if c != self.target
        )
        missing = [p for p in predictors if p not in self.frame.columns]
        if missing:
            raise ValidationError(f"Predictor columns not found: {missing}")
        if not predictors:
            raise ValidationError("TabularDataset needs at least one predictor column")

        frame = self.frame.loc[:, [*predictors, self.target]].reset_index(drop=True)
        non_numeric = [c for c in frame.columns if not pd.api.types.is_numeric_dtype(frame[c])]
        if non_numeric:
            raise ValidationError(f"Columns must be numeric: {non_numeric}")
        if frame.isna().to_numpy().any():
            raise ValidationError("TabularDataset must not contain missing values")

        object.__setattr__(self, "frame", frame.astype(np.float64))
        object.__setattr__(self, "predictors", tuple(predictors))

    @property
    def n_rows(self) -> int:
        return len(self.frame)

    def split(self, test_size: float = 0.2, random_state: int = 42) -> TrainTestSplit:
        """Deterministic shuffled train/test split.

        Args:
            test_size: Fraction of rows held out.
            random_state: Seed for the row shuffle.

        Returns:
            TrainTestSplit with disjoint partitions.

        Raises:
            ValidationError: If there are too few rows for both partitions.
        """
        if self.n_rows < 2:
            raise ValidationError(f"Need at least 2 rows to split, got {self.n_rows}")

        positions = np.arange(self.n_rows)
        train_idx, test_idx = train_test_split(
            positions, test_size=test_size, random_state=random_state, shuffle=True
        )
        return TrainTestSplit(
            train=self.frame.iloc[train_idx].copy(),
            test=self.frame.iloc[test_idx].copy(),
            target=self.target,
            predictors=self.predictors,
        )
