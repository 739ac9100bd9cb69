"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTEDRAW_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Route Drawing API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for exported files.")
    routing_api_key: Optional[str] = Field(
        default=None,
        description="API key for the routing provider. Map and route initialization is refused without it.",
    )
    osrm_base_url: str = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM-compatible routing service.",
    )
    osrm_profile: Literal["driving"] = Field(
        default="driving",
        description="Routing profile used for segment distances.",
    )
    osrm_timeout_seconds: float = Field(default=10.0, gt=0.0)
    osrm_max_retries: int = Field(default=2, ge=0)
    osrm_backoff_seconds: float = Field(default=0.5, ge=0.0)
    geocoder_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL for the Nominatim-compatible geocoding service.",
    )
    geocoder_result_limit: int = Field(default=5, ge=1)
    geocoder_timeout_seconds: float = Field(default=10.0, gt=0.0)
    use_routed_distance: bool = Field(
        default=True,
        description="Estimate distances through the routing service, falling back to straight lines.",
    )
    enable_geocoding: bool = True
    commit_trigger: Literal["pointer", "enter"] = Field(
        default="enter",
        description="Event that finishes the route being drawn: a second click or the Enter key.",
    )
    export_format: Literal["plain", "gtfs", "geojson"] = "gtfs"
    keep_degenerate_routes: bool = Field(
        default=False,
        description="Store single-point or zero-length routes instead of discarding them.",
    )
    default_center: tuple[float, float] = (40.7128, -74.006)
    default_zoom: int = Field(default=12, ge=0, le=22)
    search_zoom: int = Field(default=15, ge=0, le=22)
    agency_id: str = "DEMO_AGENCY"
    agency_name: str = "Demo Transit Agency"
    agency_url: str = "http://example.com"
    agency_timezone: str = "America/New_York"
    route_color: str = "FF0000"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("routing_api_key", mode="before")
    @classmethod
    def _blank_key_is_missing(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            # Try comma-separated
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            # Single value
            if value.strip():
                return (value.strip(),)
        # Return empty tuple if value is None or empty
        return tuple()


settings = Settings()
