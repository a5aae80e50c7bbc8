"""
Laptop Price Catalog
Centralized Configuration Management

Pydantic settings with environment variable support, validation, and type
safety for the ETL, forecasting, search and serving layers.
"""

from functools import lru_cache
from typing import Optional, List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogSettings(BaseSettings):
    """Catalog Storage Configuration"""

    model_config = SettingsConfigDict(env_prefix="CATALOG_")

    raw_dir: str = Field(default="./data/raw", description="Raw CSV snapshot tree")
    processed_path: str = Field(
        default="./data/processed/products.json",
        description="Processed catalog JSON file",
    )
    manual_dir: str = Field(default="./data/manual", description="Manual submissions directory")
    remote_url: Optional[str] = Field(
        default=None,
        description="Remote products.json used when no local catalog exists",
    )
    request_timeout: float = Field(default=10.0, description="Remote fetch timeout in seconds")


class ForecastSettings(BaseSettings):
    """Forecast Engine Configuration"""

    model_config = SettingsConfigDict(env_prefix="FORECAST_")

    alpha: float = Field(default=0.3, gt=0, le=1, description="EWMA smoothing factor")
    horizon: int = Field(default=7, ge=1, description="Forecast steps")
    clamp_to_last_actual: bool = Field(
        default=True,
        description="Keep forecasts from crossing the last actual against the trend",
    )


class SearchSettings(BaseSettings):
    """Search Pipeline Configuration"""

    model_config = SettingsConfigDict(env_prefix="SEARCH_")

    page_size: int = Field(default=24, ge=1, description="Results per page")
    max_tokens: int = Field(default=5, ge=1, description="Maximum query tokens")
    token_match: str = Field(default="all", description="Token filter policy: all or any")

    @field_validator("token_match")
    @classmethod
    def validate_token_match(cls, v: str) -> str:
        """Validate token match policy"""
        allowed = ["all", "any"]
        if v.lower() not in allowed:
            raise ValueError(f"Token match policy must be one of: {allowed}")
        return v.lower()


class SecuritySettings(BaseSettings):
    """CORS Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="pricewatch", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    forecast: ForecastSettings = Field(default_factory=ForecastSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
