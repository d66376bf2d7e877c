"""Application configuration via Pydantic Settings v2."""

from datetime import date
from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "PPILab"
    app_env: Literal["development", "testing", "staging", "production"] = "development"
    debug: bool = False

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # API
    api_host: str = "0.0.0.0"  # noqa: S104
    api_port: int = 8123

    # Data
    data_path: str = "./data/ppi_cleaned.csv"
    data_timestamp_column: str = "date"
    data_target_column: str = "agriculture"

    # Training
    random_seed: int = 42
    test_size: float = 0.2
    bank_n_jobs: int = 1

    # Time-series forecasting
    forecast_fixed_horizon: int = 12
    forecast_confidence_level: float = 0.95
    forecast_max_horizon: int = 240
    arima_max_p: int = 2
    arima_max_d: int = 2
    arima_max_q: int = 2
    ets_seasonal_periods: int = 12

    # Feature selection
    feature_selector_n_estimators: int = 500
    feature_selector_max_features: Literal["sqrt", "log2"] = "sqrt"
    feature_selection_size: int = 3

    # Artifacts
    artifacts_path: str = "./artifacts/models/fitted_models.joblib"

    # Scenarios
    sensitivity_predictor: str = "mining"
    sensitivity_model_family: str | None = "random_forest"
    default_history_points: int = 80
    default_alert_threshold: float = 180.0
    forecast_reference_date: date | None = None  # None means today

    @field_validator("test_size")
    @classmethod
    def validate_test_size(cls, v: float) -> float:
        """Ensure the held-out fraction leaves rows on both sides of the split."""
        if not 0.0 < v < 1.0:
            raise ValueError(f"test_size must be in (0, 1), got {v}")
        return v

    @field_validator("forecast_confidence_level")
    @classmethod
    def validate_confidence_level(cls, v: float) -> float:
        """Ensure the interval level is a proper probability."""
        if not 0.0 < v < 1.0:
            raise ValueError(f"forecast_confidence_level must be in (0, 1), got {v}")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
