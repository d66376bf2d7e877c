"""Pipeline artifact persistence using joblib serialization.

A ModelBundle wraps a PipelineResult with the library versions that produced
it, so a stale artifact is reported instead of silently misbehaving.

CRITICAL: Artifacts saved with one Python/scikit-learn/statsmodels version
may not load in another.
"""

from __future__ import annotations

import hashlib
import json
import sys
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import joblib  # type: ignore[import-untyped]
import sklearn  # type: ignore[import-untyped]
import statsmodels  # type: ignore[import-untyped]
import structlog

from ppilab.features.pipeline.service import PipelineResult

logger = structlog.get_logger()


@dataclass
class ModelBundle:
    """Pipeline result plus provenance.

    Attributes:
        result: The persisted pipeline result.
        created_at: Timestamp when the bundle was saved.
        python_version: Python version used when saving.
        sklearn_version: scikit-learn version used when saving.
        statsmodels_version: statsmodels version used when saving.
        bundle_hash: Deterministic hash of the bundle's model configuration.
    """

    result: PipelineResult
    created_at: datetime | None = None
    python_version: str | None = None
    sklearn_version: str | None = None
    statsmodels_version: str | None = None
    bundle_hash: str | None = None

    def compute_hash(self) -> str:
        """Hash of the winning models' configs and the selected predictors."""
        fitted = self.result.fitted
        content = {
            "time_series": [fitted.time_series_model.family.value, fitted.time_series_model.config_hash],
            "regression": [fitted.regression_model.family.value, fitted.regression_model.config_hash],
            "predictors": list(self.result.selected_predictors),
            "params": fitted.time_series_model.params,
        }
        return hashlib.sha256(
            json.dumps(content, sort_keys=True, default=str).encode()
        ).hexdigest()[:16]


def bundle_path(path: str | Path) -> Path:
    """Normalize a bundle location; ``.joblib`` is appended if there is no suffix."""
    path = Path(path)
    return path if path.suffix else path.with_suffix(".joblib")


def save_model_bundle(result: PipelineResult, path: str | Path) -> Path:
    """Save a pipeline result to disk.

    Args:
        result: PipelineResult to save.
        path: File path (``.joblib`` is appended if there is no suffix).

    Returns:
        Path to saved file.
    """
    path = bundle_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    bundle = ModelBundle(
        result=result,
        created_at=datetime.now(UTC),
        python_version=sys.version,
        sklearn_version=sklearn.__version__,
        statsmodels_version=statsmodels.__version__,
    )
    bundle.bundle_hash = bundle.compute_hash()

    joblib.dump(bundle, path, compress=3)

    logger.info(
        "pipeline.model_bundle_saved",
        path=str(path),
        bundle_hash=bundle.bundle_hash,
        run_id=result.run_id,
    )
    return path


def load_model_bundle(path: str | Path) -> ModelBundle:
    """Load a saved bundle, warning on library version mismatches.

    Args:
        path: Path to a saved bundle (``.joblib`` is appended if there is no suffix).

    Returns:
        Loaded ModelBundle.

    Raises:
        FileNotFoundError: If path doesn't exist.
        TypeError: If the file does not contain a ModelBundle.
    """
    path = bundle_path(path).resolve()
    if not path.exists():
        raise FileNotFoundError(f"Model bundle not found: {path}")

    bundle = joblib.load(path)
    if not isinstance(bundle, ModelBundle):
        raise TypeError(f"{path} does not contain a ModelBundle")

    current_python = f"{sys.version_info.major}.{sys.version_info.minor}"
    if bundle.python_version:
        saved_python = bundle.python_version.split()[0].rsplit(".", 1)[0]
        if saved_python != current_python:
            logger.warning(
                "pipeline.python_version_mismatch",
                saved_python=bundle.python_version,
                current_python=sys.version,
            )

    for library, saved, current in (
        ("sklearn", bundle.sklearn_version, sklearn.__version__),
        ("statsmodels", bundle.statsmodels_version, statsmodels.__version__),
    ):
        if saved and saved != current:
            logger.warning(
                "pipeline.library_version_mismatch",
                library=library,
                saved_version=saved,
                current_version=current,
            )

    logger.info(
        "pipeline.model_bundle_loaded",
        path=str(path),
        bundle_hash=bundle.bundle_hash,
        run_id=bundle.result.run_id,
    )
    return bundle
