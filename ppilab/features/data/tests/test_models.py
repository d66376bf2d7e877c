"""Tests for Series, TabularDataset and TrainTestSplit."""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from ppilab.core.exceptions import ValidationError
from ppilab.features.data.models import (
    Series,
    TabularDataset,
    TrainTestSplit,
    add_months,
    months_between,
)


def monthly_dates(start: date, n: int) -> tuple[date, ...]:
    return tuple(add_months(start, i) for i in range(n))


class TestMonthArithmetic:
    """Tests for calendar-month helpers."""

    def test_add_months_crosses_year(self) -> None:
        """Adding months should roll the year over."""
        assert add_months(date(2023, 11, 1), 3) == date(2024, 2, 1)

    def test_add_months_normalizes_day(self) -> None:
        """The result is always the first of the month."""
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 1)

    def test_months_between(self) -> None:
        """Whole months between two dates ignore the day."""
        assert months_between(date(2024, 1, 15), date(2025, 12, 1)) == 23
        assert months_between(date(2024, 1, 15), date(2024, 1, 31)) == 0


class TestSeries:
    """Tests for the monthly Series value type."""

    def test_series_normalizes_dates(self) -> None:
        """Dates should be moved to the first of their month."""
        series = Series(dates=(date(2024, 1, 31), date(2024, 2, 29)), values=np.array([1.0, 2.0]))

        assert series.dates == (date(2024, 1, 1), date(2024, 2, 1))
        assert series.start == date(2024, 1, 1)
        assert series.end == date(2024, 2, 1)

    def test_series_rejects_gaps(self) -> None:
        """A missing month is a contract violation."""
        with pytest.raises(ValidationError, match="without gaps"):
            Series(dates=(date(2024, 1, 1), date(2024, 3, 1)), values=np.array([1.0, 2.0]))

    def test_series_rejects_length_mismatch(self) -> None:
        """Dates and values must align."""
        with pytest.raises(ValidationError, match="Length mismatch"):
            Series(dates=monthly_dates(date(2024, 1, 1), 3), values=np.array([1.0, 2.0]))

    def test_series_rejects_non_finite(self) -> None:
        """NaN values are not allowed."""
        with pytest.raises(ValidationError, match="finite"):
            Series(dates=monthly_dates(date(2024, 1, 1), 2), values=np.array([1.0, np.nan]))

    def test_series_rejects_empty(self) -> None:
        """At least one observation is required."""
        with pytest.raises(ValidationError):
            Series(dates=(), values=np.array([]))

    def test_series_values_are_read_only(self) -> None:
        """The value buffer cannot be mutated after construction."""
        source = np.array([1.0, 2.0, 3.0])
        series = Series(dates=monthly_dates(date(2024, 1, 1), 3), values=source)

        with pytest.raises(ValueError):
            series.values[0] = 99.0
        source[0] = 99.0
        assert series.values[0] == 1.0

    def test_tail_clamps_to_length(self) -> None:
        """Requesting more points than exist returns the whole series."""
        series = Series(dates=monthly_dates(date(2024, 1, 1), 5), values=np.arange(5.0))

        assert len(series.tail(3)) == 3
        np.testing.assert_array_equal(series.tail(3).values, [2.0, 3.0, 4.0])
        assert len(series.tail(80)) == 5

    def test_pandas_round_trip(self) -> None:
        """Conversion to pandas should keep a month-start index."""
        series = Series(
            dates=monthly_dates(date(2023, 11, 1), 4), values=np.arange(4.0), name="agriculture"
        )

        converted = series.to_pandas()
        assert converted.index.freqstr == "MS"
        assert converted.name == "agriculture"

        restored = Series.from_pandas(converted)
        assert restored.dates == series.dates
        np.testing.assert_array_equal(restored.values, series.values)


class TestTabularDataset:
    """Tests for TabularDataset and its split."""

    @pytest.fixture
    def frame(self) -> pd.DataFrame:
        rng = np.random.default_rng(0)
        return pd.DataFrame(
            {
                "mining": rng.normal(100, 5, 50),
                "energy": rng.normal(110, 5, 50),
                "agriculture": rng.normal(150, 5, 50),
            }
        )

    def test_predictors_default_to_non_target_columns(self, frame: pd.DataFrame) -> None:
        """Every non-target column is a predictor unless told otherwise."""
        dataset = TabularDataset(frame=frame, target="agriculture")

        assert dataset.predictors == ("mining", "energy")
        assert dataset.n_rows == 50

    def test_rejects_missing_target(self, frame: pd.DataFrame) -> None:
        """The target column must exist."""
        with pytest.raises(ValidationError, match="Target column"):
            TabularDataset(frame=frame, target="utilities")

    def test_rejects_missing_values(self, frame: pd.DataFrame) -> None:
        """NaN cells are rejected."""
        frame.loc[3, "mining"] = np.nan
        with pytest.raises(ValidationError, match="missing values"):
            TabularDataset(frame=frame, target="agriculture")

    def test_split_is_80_20_and_disjoint(self, frame: pd.DataFrame) -> None:
        """The split holds out 20% and never shares rows."""
        split = TabularDataset(frame=frame, target="agriculture").split(0.2, random_state=42)

        assert len(split.test) == 10
        assert len(split.train) == 40
        assert set(split.train.index).isdisjoint(split.test.index)
        assert set(split.train.index) | set(split.test.index) == set(range(50))

    def test_split_is_deterministic(self, frame: pd.DataFrame) -> None:
        """Same seed, same partition."""
        dataset = TabularDataset(frame=frame, target="agriculture")

        first = dataset.split(0.2, random_state=42)
        second = dataset.split(0.2, random_state=42)

        assert first.train_rows == second.train_rows
        assert list(first.test.index) == list(second.test.index)

    def test_split_requires_two_rows(self, frame: pd.DataFrame) -> None:
        """A single row cannot be split."""
        dataset = TabularDataset(frame=frame.head(1), target="agriculture")
        with pytest.raises(ValidationError, match="at least 2 rows"):
            dataset.split()


class TestTrainTestSplit:
    """Tests for TrainTestSplit accessors."""

    @pytest.fixture
    def split(self) -> TrainTestSplit:
        frame = pd.DataFrame(
            {
                "mining": [1.0, 2.0, 3.0, 4.0, 5.0],
                "energy": [5.0, 4.0, 3.0, 2.0, 1.0],
                "agriculture": [10.0, 20.0, 30.0, 40.0, 50.0],
            }
        )
        return TrainTestSplit(
            train=frame.iloc[[0, 1, 2]],
            test=frame.iloc[[3, 4]],
            target="agriculture",
            predictors=("mining", "energy"),
        )

    def test_rejects_overlapping_partitions(self) -> None:
        """A row cannot be both trained on and tested on."""
        frame = pd.DataFrame({"mining": [1.0, 2.0], "agriculture": [3.0, 4.0]})
        with pytest.raises(ValidationError, match="share"):
            TrainTestSplit(
                train=frame.iloc[[0, 1]],
                test=frame.iloc[[1]],
                target="agriculture",
                predictors=("mining",),
            )

    def test_accessors_return_copies(self, split: TrainTestSplit) -> None:
        """Mutating an accessor result must not change the split."""
        X_train = split.X_train  # noqa: N806
        X_train.loc[:, "mining"] = 0.0

        assert split.train["mining"].tolist() == [1.0, 2.0, 3.0]
        np.testing.assert_array_equal(split.y_test, [40.0, 50.0])
        assert split.train_rows == (0, 1, 2)

    def test_restrict_keeps_rows(self, split: TrainTestSplit) -> None:
        """Restricting predictors never changes the row partition."""
        reduced = split.restrict(["energy"])

        assert reduced.predictors == ("energy",)
        assert list(reduced.X_train.columns) == ["energy"]
        assert reduced.train_rows == split.train_rows
        assert list(reduced.test.index) == list(split.test.index)

    def test_restrict_rejects_unknown_predictor(self, split: TrainTestSplit) -> None:
        """Only existing predictors may be kept."""
        with pytest.raises(ValidationError, match="Unknown predictors"):
            split.restrict(["utilities"])
