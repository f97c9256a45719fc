"""USGS earthquake catalog fetcher."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from requests import RequestException, Session

from hazard_risk.errors import MalformedPayload, TransportFailure
from hazard_risk.geo import haversine
from hazard_risk.http import create_session
from hazard_risk.models import Location, MagnitudeClass, SeismicEvent

logger = logging.getLogger(__name__)

USGS_EVENT_API = "https://earthquake.usgs.gov/fdsnws/event/1/query"

MAX_RADIUS_KM = 20001.0
QUERY_LIMIT = 50
MAX_EVENTS = 10

# (minimum magnitude, class), strongest first
MAGNITUDE_CLASSES: tuple[tuple[float, MagnitudeClass], ...] = (
    (8.0, MagnitudeClass("GREAT", "Can cause serious damage over large areas")),
    (7.0, MagnitudeClass("MAJOR", "Can cause serious damage")),
    (6.0, MagnitudeClass("STRONG", "Can cause damage to buildings")),
    (5.0, MagnitudeClass("MODERATE", "Can cause minor damage")),
    (4.0, MagnitudeClass("LIGHT", "Often felt, rarely causes damage")),
    (3.0, MagnitudeClass("MINOR", "Often felt by people")),
)
MICRO = MagnitudeClass("MICRO", "Usually not felt")

SORT_KEYS = ("distance", "time", "magnitude")


def magnitude_class(magnitude: float) -> MagnitudeClass:
    """Bucket a magnitude from MICRO (< 3) to GREAT (>= 8)."""
    for threshold, mag_class in MAGNITUDE_CLASSES:
        if magnitude >= threshold:
            return mag_class
    return MICRO


def sort_events(
    events: Iterable[SeismicEvent],
    by: str = "distance",
    limit: int | None = None,
) -> list[SeismicEvent]:
    """Order events nearest first, most recent first, or strongest first.

    Raises:
        ValueError: *by* is not one of ``SORT_KEYS``.
    """
    if by == "distance":
        ordered = sorted(events, key=lambda ev: ev.distance_km)
    elif by == "time":
        ordered = sorted(events, key=lambda ev: ev.time_ms, reverse=True)
    elif by == "magnitude":
        ordered = sorted(events, key=lambda ev: ev.magnitude, reverse=True)
    else:
        raise ValueError(f"Unknown sort key {by!r}, expected one of {SORT_KEYS}")
    return ordered if limit is None else ordered[:limit]


def _parse_event(feat: dict, location: Location) -> SeismicEvent | None:
    props = feat.get("properties") or {}
    if props.get("mag") is None:
        return None
    coords = feat["geometry"]["coordinates"]
    lon, lat = coords[0], coords[1]
    depth = coords[2] if len(coords) > 2 else 0.0
    distance = haversine(location.latitude, location.longitude, lat, lon)
    return SeismicEvent(
        id=feat.get("id", ""),
        magnitude=float(props["mag"]),
        magnitude_type=props.get("magType") or "",
        place=props.get("place") or "",
        time_ms=int(props.get("time") or 0),
        depth_km=float(depth or 0.0),
        latitude=float(lat),
        longitude=float(lon),
        distance_km=round(distance, 1),
        tsunami=props.get("tsunami") == 1,
        alert_level=props.get("alert"),
        significance=int(props.get("sig") or 0),
    )


def fetch_seismic_events(
    location: Location,
    radius_km: float = 500.0,
    min_magnitude: float = 2.5,
    window_days: int = 7,
    timeout: int = 10,
    session: Session | None = None,
) -> list[SeismicEvent]:
    """Fetch recent earthquakes around *location* from the USGS FDSN service.

    Events are filtered to *radius_km* by great-circle distance, sorted
    nearest first, and capped at 10.

    Raises:
        TransportFailure: network error, timeout or HTTP error status.
        MalformedPayload: response is not a GeoJSON feature collection.
    """
    if session is None:
        session = create_session()

    radius_km = min(radius_km, MAX_RADIUS_KM)
    end_time = datetime.now(timezone.utc)
    start_time = end_time - timedelta(days=window_days)

    params: dict[str, str | float] = {
        "format": "geojson",
        "starttime": start_time.strftime("%Y-%m-%dT%H:%M:%S"),
        "endtime": end_time.strftime("%Y-%m-%dT%H:%M:%S"),
        "latitude": round(location.latitude, 4),
        "longitude": round(location.longitude, 4),
        "maxradiuskm": radius_km,
        "minmagnitude": min_magnitude,
        "orderby": "time",
        "limit": QUERY_LIMIT,
    }
    try:
        resp = session.get(USGS_EVENT_API, params=params, timeout=timeout)
        resp.raise_for_status()
    except RequestException as exc:
        raise TransportFailure(f"USGS request failed: {exc}") from exc

    try:
        features = resp.json()["features"]
        events = [
            ev for ev in (_parse_event(feat, location) for feat in features)
            if ev is not None
        ]
    except (ValueError, KeyError, TypeError, IndexError) as exc:
        raise MalformedPayload(f"Unexpected USGS payload: {exc!r}") from exc

    nearby = sort_events(ev for ev in events if ev.distance_km <= radius_km)
    logger.debug("USGS returned %d events, %d within %.0f km", len(events), len(nearby), radius_km)
    return nearby[:MAX_EVENTS]
