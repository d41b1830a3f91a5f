from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _validate_http_url(v: str, name: str) -> str:
    if not v.startswith(("http://", "https://")):
        raise ValueError(f"{name} must start with http:// or https://")
    return v.rstrip("/")


class EstimatorSettings(BaseSettings):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"
    environment: str = "development"

    default_timezone: str = Field(
        default="Asia/Kolkata",
        description="IANA timezone used to auto-detect night time when the caller gives none",
    )
    night_start_hour: int = Field(default=22, ge=0, le=23)
    night_end_hour: int = Field(default=6, ge=0, le=23)

    rate_cards_path: str = Field(
        default="data/rate_cards.json",
        description="JSON file holding the vehicle rate cards",
    )

    # Directions retry configuration
    directions_max_retries: int = Field(default=2, ge=0, le=10)
    directions_retry_base_delay: float = Field(default=0.25, ge=0.0, le=5.0)
    directions_retry_multiplier: float = Field(default=2.0, ge=1.0, le=5.0)

    model_config = SettingsConfigDict(env_prefix="FARE_")


class GoogleMapsSettings(BaseSettings):
    api_key: str = ""
    directions_url: str = "https://maps.googleapis.com/maps/api/directions/json"
    routes_url: str = "https://routes.googleapis.com/directions/v2:computeRoutes"
    region_code: str = "IN"
    timeout: float = Field(default=30.0, gt=0, le=120.0)

    model_config = SettingsConfigDict(env_prefix="GOOGLE_MAPS_")

    @field_validator("directions_url", "routes_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _validate_http_url(v, "Google Maps URL")


class WeatherSettings(BaseSettings):
    api_key: str = ""
    base_url: str = "https://api.openweathermap.org/data/2.5/weather"
    timeout: float = Field(default=10.0, gt=0, le=60.0)

    model_config = SettingsConfigDict(env_prefix="OPENWEATHER_")

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _validate_http_url(v, "OpenWeather base URL")


class CacheSettings(BaseSettings):
    enabled: bool = True
    directions_ttl_seconds: int = Field(default=900, ge=1)
    weather_ttl_seconds: int = Field(default=600, ge=1)
    tolls_ttl_seconds: int = Field(default=900, ge=1)

    model_config = SettingsConfigDict(env_prefix="CACHE_")


class RedisSettings(BaseSettings):
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: str = ""
    ssl: bool = False

    model_config = SettingsConfigDict(env_prefix="REDIS_")


class APISettings(BaseSettings):
    key: str = ""

    model_config = SettingsConfigDict(env_prefix="API_")

    @model_validator(mode="after")
    def validate_credentials_provided(self) -> "APISettings":
        if not self.key:
            raise ValueError("Required credential not provided: API_KEY")
        return self


class CORSSettings(BaseSettings):
    origins: str = "http://localhost:8081,http://localhost:19006"

    model_config = SettingsConfigDict(env_prefix="CORS_")


class Settings(BaseSettings):
    estimator: EstimatorSettings = Field(default_factory=EstimatorSettings)
    google_maps: GoogleMapsSettings = Field(default_factory=GoogleMapsSettings)
    weather: WeatherSettings = Field(default_factory=WeatherSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    api: APISettings = Field(default_factory=APISettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
