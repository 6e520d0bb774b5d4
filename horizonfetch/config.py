"""HorizonFetch configuration — loaded from .env via pydantic-settings."""

from pydantic_settings import BaseSettings
from pydantic import Field


class HorizonSettings(BaseSettings):
    """All HorizonFetch configuration. Reads from .env file and HORIZON_* env vars."""

    # --- JPL Horizons file API ---
    horizons_uri: str = Field(
        default="https://ssd.jpl.nasa.gov/api/horizons_file.api",
        description="Horizons file API endpoint (multipart POST)",
    )
    max_connections: int = Field(
        default=2,
        ge=1,
        description="Hard cap on simultaneously in-flight requests",
    )
    request_timeout: float = Field(
        default=60.0,
        description="Per-request transport timeout in seconds",
    )

    # --- Default grid ---
    year_min: int = Field(default=2014, description="First year of the grid (Jan 1st)")
    year_max: int = Field(default=2024, description="Last year of the grid (inclusive)")
    body_count: int = Field(default=9, description="Number of bodies, starting at index 1")

    # --- Logging ---
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(
        default="console",
        description="Log format: 'console' for dev, 'json' for production",
    )

    model_config = {
        "env_prefix": "HORIZON_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton — import this everywhere
settings = HorizonSettings()
