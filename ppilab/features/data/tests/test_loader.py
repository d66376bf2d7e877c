"""Tests for the cleaned-dataset loader."""

from datetime import date
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from ppilab.core.exceptions import ValidationError
from ppilab.features.data.loader import load_dataset, prepare_dataset


class TestPrepareDataset:
    """Tests for building Series and TabularDataset views."""

    def test_builds_both_views(self, ppi_frame: pd.DataFrame) -> None:
        """The target becomes a Series; the rest become predictors."""
        data = prepare_dataset(ppi_frame, timestamp_column="date", target_column="agriculture")

        assert len(data.series) == 72
        assert data.series.start == date(2018, 1, 1)
        assert data.series.end == date(2023, 12, 1)
        assert data.series.name == "agriculture"
        assert data.dataset.target == "agriculture"
        assert data.dataset.predictors == ("mining", "manufacturing", "energy", "utilities")
        assert data.dataset.n_rows == 72

    def test_sorts_by_date(self, ppi_frame: pd.DataFrame) -> None:
        """Rows in any order produce a chronological Series."""
        shuffled = ppi_frame.sample(frac=1.0, random_state=3)

        data = prepare_dataset(shuffled, timestamp_column="date", target_column="agriculture")

        np.testing.assert_allclose(data.series.values, ppi_frame["agriculture"].to_numpy())

    def test_rejects_missing_column(self, ppi_frame: pd.DataFrame) -> None:
        """The target column must be present."""
        with pytest.raises(ValidationError, match="not found"):
            prepare_dataset(ppi_frame, timestamp_column="date", target_column="fishing")

    def test_rejects_duplicate_months(self, ppi_frame: pd.DataFrame) -> None:
        """Two rows for the same month are ambiguous."""
        duplicated = pd.concat([ppi_frame, ppi_frame.iloc[[5]]], ignore_index=True)

        with pytest.raises(ValidationError, match="duplicate months"):
            prepare_dataset(duplicated, timestamp_column="date", target_column="agriculture")

    def test_missing_target_in_middle_breaks_cadence(self, ppi_frame: pd.DataFrame) -> None:
        """Dropping an interior month leaves a gap, which the Series rejects."""
        ppi_frame.loc[10, "agriculture"] = None

        with pytest.raises(ValidationError, match="without gaps"):
            prepare_dataset(ppi_frame, timestamp_column="date", target_column="agriculture")

    def test_drops_leading_missing_target(self, ppi_frame: pd.DataFrame) -> None:
        """Rows with an unusable target at the edges are excluded."""
        ppi_frame["agriculture"] = ppi_frame["agriculture"].astype(object)
        ppi_frame.loc[0, "agriculture"] = "n/a"

        data = prepare_dataset(ppi_frame, timestamp_column="date", target_column="agriculture")

        assert len(data.series) == 71
        assert data.series.start == date(2018, 2, 1)

    def test_missing_predictor_only_shrinks_tabular_view(self, ppi_frame: pd.DataFrame) -> None:
        """A missing predictor cell drops the row from regression data only."""
        ppi_frame.loc[20, "energy"] = np.nan

        data = prepare_dataset(ppi_frame, timestamp_column="date", target_column="agriculture")

        assert len(data.series) == 72
        assert data.dataset.n_rows == 71


class TestLoadDataset:
    """Tests for reading the cleaned CSV."""

    def test_reads_csv(self, ppi_frame: pd.DataFrame, tmp_path: Path) -> None:
        """A cleaned CSV on disk loads into both views."""
        path = tmp_path / "ppi_cleaned.csv"
        ppi_frame.to_csv(path, index=False)

        data = load_dataset(path, timestamp_column="date", target_column="agriculture")

        assert len(data.series) == 72
        assert data.dataset.n_rows == 72

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """A missing file is reported, not silently skipped."""
        with pytest.raises(FileNotFoundError):
            load_dataset(tmp_path / "absent.csv", timestamp_column="date", target_column="x")
