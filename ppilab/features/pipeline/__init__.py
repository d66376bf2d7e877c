"""Training pipeline and fitted-model persistence."""

from ppilab.features.pipeline.persistence import (
    ModelBundle,
    bundle_path,
    load_model_bundle,
    save_model_bundle,
)
from ppilab.features.pipeline.service import FittedModels, PipelineResult, TrainingPipeline

__all__ = [
    "FittedModels",
    "ModelBundle",
    "PipelineResult",
    "TrainingPipeline",
    "bundle_path",
    "load_model_bundle",
    "save_model_bundle",
]
