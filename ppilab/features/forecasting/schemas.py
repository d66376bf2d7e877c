"""Pydantic configuration schemas for model families.

Model configs are designed to be:
- Immutable (frozen=True) for reproducibility
- Versioned (schema_version) for artifact storage
- Hashable (config_hash) so fitted artifacts record what produced them
"""

from __future__ import annotations

import hashlib
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Model Configuration Base
# =============================================================================


class ModelConfigBase(BaseModel):
    """Base configuration for all model families.

    - Immutability after creation (frozen=True)
    - No extra fields allowed (extra="forbid")
    - Schema versioning for reproducibility
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    schema_version: str = Field(
        default="1.0",
        description="Semantic version of this config schema",
        pattern=r"^\d+\.\d+(\.\d+)?$",
    )

    def config_hash(self) -> str:
        """Generate deterministic hash of configuration.

        Returns:
            16-character hex string hash of config JSON.
        """
        config_json = self.model_dump_json()
        return hashlib.sha256(config_json.encode()).hexdigest()[:16]


# =============================================================================
# Time-Series Model Configs
# =============================================================================


class ArimaModelConfig(ModelConfigBase):
    """Automatic ARIMA order selection.

    The differencing order d is chosen by repeated KPSS tests (difference
    while the level-stationarity null is rejected). (p, q) are then searched
    over the grid [0..max_p] x [0..max_q], with and without a constant/drift
    term, and the candidate with the lowest information criterion wins.

    Attributes:
        max_p: Largest autoregressive order searched.
        max_d: Largest differencing order.
        max_q: Largest moving-average order searched.
        kpss_alpha: Significance level of the KPSS test.
        information_criterion: Criterion minimised over the grid.
    """

    model_type: Literal["arima"] = "arima"
    max_p: int = Field(default=2, ge=0, le=5, description="Largest AR order searched")
    max_d: int = Field(default=2, ge=0, le=2, description="Largest differencing order")
    max_q: int = Field(default=2, ge=0, le=5, description="Largest MA order searched")
    kpss_alpha: float = Field(default=0.05, gt=0.0, lt=1.0, description="KPSS significance")
    information_criterion: Literal["aic", "aicc", "bic"] = "aicc"


class EtsModelConfig(ModelConfigBase):
    """Automatic ETS form selection (additive errors).

    Candidates: trend in {none, additive, damped additive} crossed with
    seasonality in {none, additive}; seasonal forms are only tried when at
    least two full seasonal cycles are observed.

    Attributes:
        seasonal_periods: Season length in months.
        allow_damped: Include damped-trend candidates.
        allow_seasonal: Include seasonal candidates.
        information_criterion: Criterion minimised over the candidates.
    """

    model_type: Literal["ets"] = "ets"
    seasonal_periods: int = Field(default=12, ge=2, le=24, description="Season length")
    allow_damped: bool = True
    allow_seasonal: bool = True
    information_criterion: Literal["aic", "aicc", "bic"] = "aicc"


TimeSeriesModelConfig = ArimaModelConfig | EtsModelConfig
