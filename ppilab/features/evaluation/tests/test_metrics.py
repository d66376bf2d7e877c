"""Tests for the metric evaluator."""

import math

import numpy as np
import pytest

from ppilab.core.exceptions import DegenerateMetric, DivisionByZero
from ppilab.features.evaluation.metrics import MetricEvaluator


class TestRMSE:
    """Tests for Root Mean Squared Error."""

    def test_rmse_perfect_predictions(self, evaluator: MetricEvaluator) -> None:
        """RMSE is 0 for perfect predictions."""
        values = np.array([10.0, 20.0, 30.0])
        assert evaluator.rmse(values, values) == 0.0

    def test_rmse_known_values(self, evaluator: MetricEvaluator) -> None:
        """Test RMSE with known values."""
        # errors 3, 4 -> sqrt((9 + 16) / 2)
        result = evaluator.rmse(np.array([0.0, 0.0]), np.array([3.0, 4.0]))
        assert result == pytest.approx(math.sqrt(12.5))

    def test_rmse_at_least_mae(self, evaluator: MetricEvaluator) -> None:
        """RMSE is never below MAE."""
        rng = np.random.default_rng(1)
        actual = rng.normal(100, 10, 50)
        predicted = actual + rng.normal(0, 5, 50)

        assert evaluator.rmse(actual, predicted) >= evaluator.mae(actual, predicted)

    def test_rmse_length_mismatch(self, evaluator: MetricEvaluator) -> None:
        """Mismatched arrays are rejected."""
        with pytest.raises(ValueError, match="Length mismatch"):
            evaluator.rmse(np.array([1.0, 2.0]), np.array([1.0]))

    def test_rmse_empty(self, evaluator: MetricEvaluator) -> None:
        """Empty arrays are rejected."""
        with pytest.raises(ValueError, match="empty"):
            evaluator.rmse(np.array([]), np.array([]))


class TestMAE:
    """Tests for Mean Absolute Error."""

    def test_mae_known_values(self, evaluator: MetricEvaluator) -> None:
        """Test MAE with known values."""
        actuals = np.array([10.0, 20.0, 30.0])
        predictions = np.array([12.0, 18.0, 33.0])

        # |10-12| + |20-18| + |30-33| = 7 -> 7/3
        assert evaluator.mae(actuals, predictions) == pytest.approx(7 / 3)


class TestMAPE:
    """Tests for Mean Absolute Percentage Error."""

    def test_mape_known_values(self, evaluator: MetricEvaluator) -> None:
        """Test MAPE with known values."""
        # 10% and 5% -> 7.5%
        result = evaluator.mape(np.array([100.0, 200.0]), np.array([110.0, 190.0]))
        assert result == pytest.approx(7.5)

    def test_mape_zero_actual_raises(self, evaluator: MetricEvaluator) -> None:
        """A zero actual makes MAPE undefined."""
        with pytest.raises(DivisionByZero) as exc_info:
            evaluator.mape(np.array([0.0, 10.0]), np.array([1.0, 10.0]))

        assert exc_info.value.code == "DIVISION_BY_ZERO"
        assert exc_info.value.details["n_zeros"] == 1


class TestR2:
    """Tests for the coefficient of determination."""

    def test_r2_perfect_predictions(self, evaluator: MetricEvaluator) -> None:
        """R² is 1 for perfect predictions."""
        values = np.array([1.0, 2.0, 4.0])
        assert evaluator.r2(values, values) == pytest.approx(1.0)

    def test_r2_mean_prediction_is_zero(self, evaluator: MetricEvaluator) -> None:
        """Predicting the mean scores R² = 0."""
        actual = np.array([1.0, 2.0, 3.0])
        assert evaluator.r2(actual, np.full(3, 2.0)) == pytest.approx(0.0)

    def test_r2_constant_actuals_degenerate(self, evaluator: MetricEvaluator) -> None:
        """R² is undefined when the actuals have no variance."""
        with pytest.raises(DegenerateMetric, match="r2"):
            evaluator.r2(np.full(4, 5.0), np.array([5.0, 4.0, 6.0, 5.0]))


class TestEvaluate:
    """Tests for the combined evaluation."""

    def test_evaluate_all_defined(self, evaluator: MetricEvaluator) -> None:
        """All four metrics are computed for well-behaved data."""
        metrics = evaluator.evaluate(np.array([10.0, 20.0, 30.0]), np.array([11.0, 19.0, 30.0]))

        assert metrics.n_samples == 3
        assert metrics.warnings == ()
        assert metrics.mae == pytest.approx(2 / 3)
        assert all(metrics.is_defined(name) for name in ("rmse", "mae", "mape", "r2"))

    def test_evaluate_flags_zero_actual(self, evaluator: MetricEvaluator) -> None:
        """An undefined MAPE becomes NaN plus a warning, not a crash."""
        metrics = evaluator.evaluate(np.array([0.0, 10.0, 20.0]), np.array([1.0, 9.0, 21.0]))

        assert math.isnan(metrics.mape)
        assert not metrics.is_defined("mape")
        assert metrics.is_defined("rmse")
        assert len(metrics.warnings) == 1
        assert "mape" in metrics.warnings[0]

    def test_evaluate_flags_constant_actuals(self, evaluator: MetricEvaluator) -> None:
        """A constant target leaves R² undefined."""
        metrics = evaluator.evaluate(np.full(3, 7.0), np.array([7.0, 8.0, 6.0]))

        assert math.isnan(metrics.r2)
        assert metrics.as_dict()["r2"] is None
        assert metrics.as_dict()["rmse"] == pytest.approx(math.sqrt(2 / 3))
