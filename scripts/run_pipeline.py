#!/usr/bin/env python
"""Training pipeline CLI.

Fit both model banks on a cleaned PPI CSV, print the evaluation summary and
save the fitted-model bundle that the API loads at startup.

Usage:
    # Train with settings from the environment / .env
    uv run python scripts/run_pipeline.py

    # Train on a specific file and save elsewhere
    uv run python scripts/run_pipeline.py --data data/ppi_cleaned.csv --output artifacts/run.joblib

    # Evaluate only, without saving
    uv run python scripts/run_pipeline.py --no-save
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ppilab.core.config import get_settings
from ppilab.core.exceptions import PPILabError
from ppilab.core.logging import configure_logging
from ppilab.features.data.loader import load_dataset
from ppilab.features.evaluation.bank import BankResult
from ppilab.features.evaluation.results import EvaluationResult
from ppilab.features.pipeline.persistence import save_model_bundle
from ppilab.features.pipeline.service import PipelineResult, TrainingPipeline


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="PPILab training pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  run_pipeline.py
  run_pipeline.py --data data/ppi_cleaned.csv --target agriculture
  run_pipeline.py --no-save
        """,
    )
    parser.add_argument(
        "--data",
        type=Path,
        default=Path(settings.data_path),
        help=f"Cleaned CSV to train on (default: {settings.data_path})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path(settings.artifacts_path),
        help=f"Where to save the model bundle (default: {settings.artifacts_path})",
    )
    parser.add_argument(
        "--timestamp-column",
        default=settings.data_timestamp_column,
        help="Date column of the CSV",
    )
    parser.add_argument(
        "--target",
        default=settings.data_target_column,
        help="Column to forecast and regress",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Evaluate only; do not write the bundle",
    )
    return parser


def format_metric(value: float | None) -> str:
    return "undefined" if value is None else f"{value:.4f}"


def print_bank(title: str, bank: BankResult, winner: EvaluationResult) -> None:
    """Print one bank's per-family metrics."""
    print(title)
    print("-" * len(title))
    for result in bank.results:
        marker = "*" if result.family is winner.family else " "
        metrics = result.metrics.as_dict()
        print(
            f" {marker} {result.family.value:<18}"
            + "  ".join(f"{name}={format_metric(v)}" for name, v in metrics.items())
        )
        for warning in result.metrics.warnings:
            print(f"     note: {warning}")
    for family, reason in bank.failures.items():
        print(f"   {family.value:<18}FAILED: {reason}")
    print()


def print_summary(result: PipelineResult) -> None:
    print()
    print(f"PPILab - Training run {result.run_id}")
    print("=" * 45)
    print_bank("Time-series models (in-sample)", result.forecasting, result.best_time_series)
    print("Feature ranking")
    print("---------------")
    for name, score in result.ranking.scores:
        selected = "*" if name in result.selected_predictors else " "
        print(f" {selected} {name:<18}{score:.4f}")
    print()
    print_bank("Regression models (test partition)", result.regression, result.best_regression)
    print(f"Sensitivity model: {result.fitted.regression_model.family.value}")


def main() -> int:
    """Main entry point."""
    args = create_parser().parse_args()
    configure_logging()

    try:
        data = load_dataset(
            args.data, timestamp_column=args.timestamp_column, target_column=args.target
        )
        result = TrainingPipeline().run(data)
    except FileNotFoundError as e:
        print(f"ERROR: {e}")
        return 1
    except PPILabError as e:
        print(f"ERROR: {e.message}")
        return 1

    print_summary(result)

    if not args.no_save:
        path = save_model_bundle(result, args.output)
        print(f"Saved model bundle to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
