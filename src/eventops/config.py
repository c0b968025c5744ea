"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="EVENTOPS_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Event Operations Dispatch API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for data files and outputs.")
    orders_file: Path = Field(
        default=Path("data/orders.json"),
        description="Order dump used when the database is not configured.",
    )
    settings_file: Path = Field(
        default=Path("data/settings-db.json"),
        description="Scheduling settings document (hub, work/lunch windows, teams).",
    )
    geoapify_base_url: str = Field(
        default="https://api.geoapify.com",
        description="Base URL for the geocoding and routing provider.",
    )
    geoapify_api_key: Optional[str] = Field(default=None, description="Provider API key.")
    geoapify_timeout_seconds: float = Field(default=15.0, gt=0.0)
    geoapify_max_retries: int = Field(default=2, ge=0)
    geoapify_backoff_seconds: float = Field(default=0.5, ge=0.0)
    routing_mode: Literal["drive", "truck", "light_truck"] = Field(
        default="drive",
        description="Travel mode used when computing team journeys.",
    )
    max_parallel_requests: int = Field(
        default=8,
        ge=1,
        description="Upper bound on concurrent gateway calls for one request.",
    )
    schedule_timeout_seconds: float = Field(
        default=45.0,
        gt=0.0,
        description="Deadline for computing every team journey of a day view.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("data_root", "orders_file", "settings_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("geoapify_base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

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
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
