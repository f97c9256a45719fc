"""Open-Meteo forecast fetchers: storm telemetry and precipitation history."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from requests import RequestException, Session

from hazard_risk.errors import MalformedPayload, TransportFailure
from hazard_risk.http import create_session
from hazard_risk.models import (
    CurrentWeather,
    Location,
    PrecipitationHistory,
    RiskLevel,
    Storm,
    StormKind,
    StormTelemetry,
    WeatherAlert,
)

logger = logging.getLogger(__name__)

OPEN_METEO_FORECAST_API = "https://api.open-meteo.com/v1/forecast"

# Stand-ins for fields the provider omits
NEUTRAL_TEMPERATURE_C = 20.0
NEUTRAL_HUMIDITY_PCT = 50.0

DRY_DAY_MM = 1.0
THUNDERSTORM_CODE = 95

_CURRENT_FIELDS = (
    "temperature_2m",
    "relative_humidity_2m",
    "apparent_temperature",
    "precipitation",
    "cloud_cover",
    "wind_speed_10m",
    "wind_gusts_10m",
    "wind_direction_10m",
    "weather_code",
    "pressure_msl",
)
_HOURLY_FIELDS = ("wind_speed_10m", "wind_gusts_10m", "precipitation", "weather_code")

# (minimum sustained wind km/h, kind, hurricane category)
_STORM_SCALE: tuple[tuple[float, StormKind, int | None], ...] = (
    (252.0, StormKind.HURRICANE, 5),
    (209.0, StormKind.HURRICANE, 4),
    (178.0, StormKind.HURRICANE, 3),
    (154.0, StormKind.HURRICANE, 2),
    (119.0, StormKind.HURRICANE, 1),
    (63.0, StormKind.TROPICAL_STORM, None),
    (40.0, StormKind.DEPRESSION, None),
)


def _number(value: object, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _optional_number(value: object) -> float | None:
    if value is None:
        return None
    return _number(value, 0.0)


def _get_json(session: Session, params: dict, timeout: int, base_url: str) -> dict:
    try:
        resp = session.get(base_url, params=params, timeout=timeout)
        resp.raise_for_status()
    except RequestException as exc:
        raise TransportFailure(f"Open-Meteo request failed: {exc}") from exc
    try:
        data = resp.json()
    except ValueError as exc:
        raise MalformedPayload(f"Open-Meteo returned invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedPayload(f"Open-Meteo returned {type(data).__name__}, expected object")
    return data


def parse_current(raw: dict) -> CurrentWeather:
    """Build a CurrentWeather from an Open-Meteo ``current`` block."""
    return CurrentWeather(
        temperature=_number(raw.get("temperature_2m"), NEUTRAL_TEMPERATURE_C),
        humidity=_number(raw.get("relative_humidity_2m"), NEUTRAL_HUMIDITY_PCT),
        apparent_temperature=_optional_number(raw.get("apparent_temperature")),
        precipitation=_number(raw.get("precipitation"), 0.0),
        cloud_cover=_optional_number(raw.get("cloud_cover")),
        wind_speed_kmh=_number(raw.get("wind_speed_10m"), 0.0),
        wind_gusts_kmh=_number(raw.get("wind_gusts_10m"), 0.0),
        wind_direction_deg=_number(raw.get("wind_direction_10m"), 0.0),
        weather_code=int(_number(raw.get("weather_code"), 0.0)),
        pressure_msl=_optional_number(raw.get("pressure_msl")),
    )


def classify_storm(wind_speed_kmh: float, wind_gusts_kmh: float) -> tuple[StormKind, int | None]:
    """Classify a storm on a Saffir-Simpson style scale.

    Uses the larger of sustained wind and 80% of the gust speed.
    """
    max_wind = max(wind_speed_kmh, wind_gusts_kmh * 0.8)
    for threshold, kind, category in _STORM_SCALE:
        if max_wind >= threshold:
            return kind, category
    return StormKind.SEVERE_WEATHER, None


def detect_storms(current: CurrentWeather) -> tuple[Storm, ...]:
    """Detect an active storm cell from the current snapshot."""
    if not (
        current.weather_code >= THUNDERSTORM_CODE
        or current.wind_gusts_kmh > 90
        or current.wind_speed_kmh > 60
    ):
        return ()

    kind, category = classify_storm(current.wind_speed_kmh, current.wind_gusts_kmh)
    return (
        Storm(
            kind=kind,
            category=category,
            wind_speed_kmh=current.wind_speed_kmh,
            wind_gusts_kmh=current.wind_gusts_kmh,
            direction_deg=current.wind_direction_deg,
            pressure_msl=current.pressure_msl,
        ),
    )


def generate_alerts(current: CurrentWeather, hourly: dict) -> tuple[WeatherAlert, ...]:
    """Derive wind, rain and thunderstorm warnings from forecast data."""
    alerts: list[WeatherAlert] = []

    gusts = current.wind_gusts_kmh
    if gusts > 80:
        alerts.append(
            WeatherAlert(
                id="wind-alert",
                type="WIND",
                severity=RiskLevel.HIGH if gusts > 100 else RiskLevel.MODERATE,
                title="High Wind Warning",
                description=f"Wind gusts up to {round(gusts)} km/h",
                recommendation="Secure loose objects. Avoid unnecessary travel.",
            )
        )

    next_24h = sum(_number(p, 0.0) for p in (hourly.get("precipitation") or [])[:24])
    if next_24h > 50:
        alerts.append(
            WeatherAlert(
                id="precip-alert",
                type="RAIN",
                severity=RiskLevel.HIGH if next_24h > 100 else RiskLevel.MODERATE,
                title="Heavy Rainfall Warning",
                description=f"Expected {round(next_24h)}mm in next 24 hours",
                recommendation="Monitor local flood warnings. Avoid low-lying areas.",
            )
        )

    if current.weather_code >= THUNDERSTORM_CODE:
        alerts.append(
            WeatherAlert(
                id="thunderstorm-alert",
                type="STORM",
                severity=RiskLevel.HIGH if current.weather_code >= 96 else RiskLevel.MODERATE,
                title="Thunderstorm Warning",
                description="Active thunderstorm conditions in your area",
                recommendation="Seek shelter indoors. Avoid open areas.",
            )
        )

    return tuple(alerts)


def fetch_storm_telemetry(
    location: Location,
    forecast_days: int = 3,
    timeout: int = 10,
    session: Session | None = None,
    base_url: str = OPEN_METEO_FORECAST_API,
) -> StormTelemetry:
    """Fetch current and hourly forecast data and interpret storm conditions.

    Raises:
        TransportFailure: network error, timeout or HTTP error status.
        MalformedPayload: response lacks a ``current`` block.
    """
    if session is None:
        session = create_session()

    params = {
        "latitude": round(location.latitude, 4),
        "longitude": round(location.longitude, 4),
        "current": ",".join(_CURRENT_FIELDS),
        "hourly": ",".join(_HOURLY_FIELDS),
        "forecast_days": forecast_days,
        "timezone": "auto",
    }
    data = _get_json(session, params, timeout, base_url)

    raw_current = data.get("current")
    if not isinstance(raw_current, dict):
        raise MalformedPayload("Open-Meteo response has no 'current' block")
    hourly = data.get("hourly")
    if not isinstance(hourly, dict):
        hourly = {}

    current = parse_current(raw_current)
    telemetry = StormTelemetry(
        alerts=generate_alerts(current, hourly),
        storms=detect_storms(current),
        current=current,
    )
    logger.debug(
        "Storm telemetry: %d storms, %d alerts", len(telemetry.storms), len(telemetry.alerts)
    )
    return telemetry


def summarize_precipitation(
    dates: list[str],
    values: list[float | None],
) -> PrecipitationHistory:
    """Compute totals and the trailing dry streak for a daily series.

    *values* is ordered oldest first; missing days count as 0 mm.
    """
    series = tuple(_number(v, 0.0) for v in values)

    dry_days = 0
    for mm in reversed(series):
        if mm >= DRY_DAY_MM:
            break
        dry_days += 1

    return PrecipitationHistory(
        dates=tuple(dates),
        daily_precipitation=series,
        total_7day=sum(series[-7:]),
        total_3day=sum(series[-3:]),
        consecutive_dry_days=dry_days,
    )


def fetch_precipitation_history(
    location: Location,
    days: int = 7,
    timeout: int = 10,
    session: Session | None = None,
    base_url: str = OPEN_METEO_FORECAST_API,
) -> PrecipitationHistory:
    """Fetch the trailing *days* of daily precipitation, today included.

    Raises:
        TransportFailure: network error, timeout or HTTP error status.
        MalformedPayload: response lacks a ``daily`` precipitation series.
    """
    if session is None:
        session = create_session()

    end_date = date.today()
    start_date = end_date - timedelta(days=days - 1)
    params = {
        "latitude": round(location.latitude, 4),
        "longitude": round(location.longitude, 4),
        "daily": "precipitation_sum,rain_sum",
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "timezone": "auto",
    }
    data = _get_json(session, params, timeout, base_url)

    daily = data.get("daily")
    if not isinstance(daily, dict) or not isinstance(daily.get("precipitation_sum"), list):
        raise MalformedPayload("Open-Meteo response has no daily precipitation_sum")

    history = summarize_precipitation(daily.get("time") or [], daily["precipitation_sum"])
    logger.debug(
        "Precipitation: %.1fmm/7d, %.1fmm/3d, %d dry days",
        history.total_7day,
        history.total_3day,
        history.consecutive_dry_days,
    )
    return history
