"""Geographic utilities: Haversine distance, compass bearings, relative time."""

from __future__ import annotations

import math
import time

EARTH_RADIUS_KM = 6371.0

_COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance in km between two points on Earth."""
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.asin(math.sqrt(min(1.0, a)))


def compass_direction(degrees: float) -> str:
    """Map a bearing in degrees to one of 16 compass points."""
    return _COMPASS_POINTS[round(degrees / 22.5) % 16]


def format_time_ago(time_ms: int, now_ms: int | None = None) -> str:
    """Render an event timestamp as a coarse "time ago" label."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    seconds = max(0, (now_ms - time_ms) // 1000)

    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"
