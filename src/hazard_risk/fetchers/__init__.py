"""Provider fetchers that normalize raw payloads into observation records."""

from hazard_risk.fetchers.open_meteo import fetch_precipitation_history, fetch_storm_telemetry
from hazard_risk.fetchers.usgs import fetch_seismic_events, magnitude_class, sort_events

__all__ = [
    "fetch_precipitation_history",
    "fetch_seismic_events",
    "fetch_storm_telemetry",
    "magnitude_class",
    "sort_events",
]
