"""Configuration model for the hazard risk engine."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class HazardRiskConfig(BaseSettings):
    """All configurable parameters for ingestion, caching and refresh.

    Values can be set via constructor arguments, environment variables
    prefixed with HAZARD_RISK_, or defaults.
    """

    model_config = {"env_prefix": "HAZARD_RISK_"}

    seismic_radius_km: float = Field(
        default=500.0, gt=0.0, le=20001.0, description="Search radius for seismic events."
    )
    min_magnitude: float = Field(
        default=2.5, ge=0.0, le=10.0, description="Minimum earthquake magnitude."
    )
    seismic_window_days: int = Field(
        default=7, ge=1, le=30, description="Days of seismic history to query."
    )
    precipitation_days: int = Field(
        default=7, ge=3, le=92, description="Days of daily precipitation history."
    )
    forecast_days: int = Field(
        default=3, ge=1, le=16, description="Hourly forecast window for storm telemetry."
    )
    request_timeout: int = Field(
        default=10, ge=1, le=120, description="HTTP request timeout in seconds."
    )
    cache_ttl_seconds: int = Field(
        default=600, ge=0, description="Freshness window for cached observations."
    )
    refresh_interval_seconds: int = Field(
        default=600, ge=1, description="Refresh period for the combined assessment."
    )
    seismic_refresh_interval_seconds: int = Field(
        default=300, ge=1, description="Refresh period for seismic-only monitoring."
    )
    derive_heatwave: bool = Field(
        default=False,
        description="Classify heatwave level from current weather when none is supplied.",
    )
    output_file: Path = Field(
        default=Path("hazard_risk_output.json"), description="Output file path."
    )
