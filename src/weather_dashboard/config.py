"""Typed settings loader for the weather dashboard core."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AnyUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError
from .log_setup import LOG_LEVELS


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    http_user_agent: str = Field(
        default="weather-dashboard/0.1 (contact: support@example.com)",
        alias="HTTP_USER_AGENT",
    )

    weatherapi_keys: str = Field(default="", alias="WEATHERAPI_KEYS", repr=False)
    weatherapi_base_url: AnyUrl = Field(
        default="https://api.weatherapi.com/v1",
        alias="WEATHERAPI_BASE_URL",
    )
    open_meteo_geocoding_url: AnyUrl = Field(
        default="https://geocoding-api.open-meteo.com",
        alias="OPEN_METEO_GEOCODING_URL",
    )
    open_meteo_result_count: int = Field(default=10, alias="OPEN_METEO_RESULT_COUNT")

    gemini_api_key: str | None = Field(default=None, alias="GEMINI_API_KEY", repr=False)
    gemini_base_url: AnyUrl = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_BASE_URL",
    )
    gemini_model: str = Field(default="gemini-2.0-flash-exp", alias="GEMINI_MODEL")
    gemini_max_results: int = Field(default=5, alias="GEMINI_MAX_RESULTS")
    generative_fallback_enabled: bool = Field(default=True, alias="GENERATIVE_FALLBACK_ENABLED")

    search_min_query_length: int = Field(default=1, alias="SEARCH_MIN_QUERY_LENGTH")
    search_max_results: int = Field(default=15, alias="SEARCH_MAX_RESULTS")
    search_dedup_threshold_deg: float = Field(default=0.1, alias="SEARCH_DEDUP_THRESHOLD_DEG")
    search_dedup_radius_km: float | None = Field(default=None, alias="SEARCH_DEDUP_RADIUS_KM")
    search_drop_null_island: bool = Field(default=True, alias="SEARCH_DROP_NULL_ISLAND")
    search_max_print: int = Field(default=15, alias="SEARCH_MAX_PRINT")
    provider_timeout_seconds: float = Field(default=8.0, alias="PROVIDER_TIMEOUT_SECONDS")

    forecast_days: int = Field(default=7, alias="FORECAST_DAYS")
    forecast_timeout_seconds: float = Field(default=15.0, alias="FORECAST_TIMEOUT_SECONDS")

    @field_validator("gemini_api_key", "search_dedup_radius_km", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat empty env-string values as unset."""
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @property
    def weatherapi_key_list(self) -> list[str]:
        """Configured WeatherAPI keys in rotation order."""
        return [key.strip() for key in self.weatherapi_keys.split(",") if key.strip()]

    @model_validator(mode="after")
    def validate_limits(self) -> Settings:
        """Validate numeric bounds and cross-field constraints."""
        if self.log_level.strip().upper() not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(LOG_LEVELS)}.")
        if not self.http_user_agent.strip():
            raise ValueError("HTTP_USER_AGENT must not be empty.")
        if self.open_meteo_result_count <= 0:
            raise ValueError("OPEN_METEO_RESULT_COUNT must be > 0.")
        if not self.gemini_model.strip():
            raise ValueError("GEMINI_MODEL must not be empty.")
        if self.gemini_max_results <= 0:
            raise ValueError("GEMINI_MAX_RESULTS must be > 0.")
        if self.search_min_query_length < 0:
            raise ValueError("SEARCH_MIN_QUERY_LENGTH must be >= 0.")
        if self.search_max_results <= 0:
            raise ValueError("SEARCH_MAX_RESULTS must be > 0.")
        if self.search_dedup_threshold_deg <= 0:
            raise ValueError("SEARCH_DEDUP_THRESHOLD_DEG must be > 0.")
        if self.search_dedup_radius_km is not None and self.search_dedup_radius_km <= 0:
            raise ValueError("SEARCH_DEDUP_RADIUS_KM must be > 0 when set.")
        if self.search_max_print <= 0:
            raise ValueError("SEARCH_MAX_PRINT must be > 0.")
        if self.provider_timeout_seconds <= 0:
            raise ValueError("PROVIDER_TIMEOUT_SECONDS must be > 0.")
        if not (1 <= self.forecast_days <= 14):
            raise ValueError("FORECAST_DAYS must be between 1 and 14.")
        if self.forecast_timeout_seconds <= 0:
            raise ValueError("FORECAST_TIMEOUT_SECONDS must be > 0.")
        return self

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for logging (no credentials)."""
        return {
            "app_env": self.app_env,
            "log_level": self.log_level,
            "weatherapi_base_url": str(self.weatherapi_base_url),
            "weatherapi_key_count": len(self.weatherapi_key_list),
            "open_meteo_geocoding_url": str(self.open_meteo_geocoding_url),
            "gemini_configured": bool(self.gemini_api_key),
            "gemini_model": self.gemini_model,
            "generative_fallback_enabled": self.generative_fallback_enabled,
            "search_min_query_length": self.search_min_query_length,
            "search_max_results": self.search_max_results,
            "search_dedup_threshold_deg": self.search_dedup_threshold_deg,
            "search_dedup_radius_km": self.search_dedup_radius_km,
            "search_drop_null_island": self.search_drop_null_island,
            "provider_timeout_seconds": self.provider_timeout_seconds,
            "forecast_days": self.forecast_days,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
