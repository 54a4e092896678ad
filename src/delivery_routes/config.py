"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DR_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Delivery Route Optimizer API"
    api_prefix: str = "/api"
    maps_api_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api",
        description="Base URL for the Google Maps web services (distance matrix and directions).",
    )
    maps_api_key: Optional[str] = Field(
        default=None,
        description="API key for the maps web services. Road distances are skipped when unset.",
    )
    travel_mode: Literal["driving", "walking", "bicycling", "transit"] = Field(
        default="driving",
        description="Travel mode used when requesting road distances and directions.",
    )
    distance_service_timeout_seconds: float = Field(default=15.0, gt=0.0)
    distance_service_max_retries: int = Field(default=2, ge=0)
    distance_service_backoff_seconds: float = Field(default=0.5, ge=0.0)
    max_destinations_per_request: int = Field(
        default=25,
        ge=1,
        description="Maximum destinations sent in one distance matrix request.",
    )
    average_speed_kmh: float = Field(
        default=30.0,
        gt=0.0,
        description="Assumed urban average speed used to estimate durations without road data.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
