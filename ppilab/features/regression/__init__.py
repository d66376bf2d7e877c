"""Cross-sectional regression: feature selection, model bank, sensitivity."""

from ppilab.features.regression.bank import RegressionModelBank
from ppilab.features.regression.features import FeatureRanking, FeatureSelector
from ppilab.features.regression.models import (
    GradientBoostingModel,
    KnnModel,
    LinearRegressor,
    RandomForestModel,
    Regressor,
    default_regressors,
    model_factory,
    regressor_for,
)
from ppilab.features.regression.schemas import (
    GradientBoostingConfig,
    KnnConfig,
    LinearRegressionConfig,
    RandomForestConfig,
    RegressionModelConfig,
)
from ppilab.features.regression.sensitivity import SensitivityAnalyzer, SensitivityResult

__all__ = [
    "FeatureRanking",
    "FeatureSelector",
    "GradientBoostingConfig",
    "GradientBoostingModel",
    "KnnConfig",
    "KnnModel",
    "LinearRegressionConfig",
    "LinearRegressor",
    "RandomForestConfig",
    "RandomForestModel",
    "RegressionModelBank",
    "RegressionModelConfig",
    "Regressor",
    "SensitivityAnalyzer",
    "SensitivityResult",
    "default_regressors",
    "model_factory",
    "regressor_for",
]
