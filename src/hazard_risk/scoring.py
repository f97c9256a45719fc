"""Per-hazard risk scoring.

Every scorer sums additive factor points, clamps the total into [0, 100]
and maps it through ``level_of``. Reasoning and recommendations are looked
up from per-hazard tables keyed by the final level.

Scorers never raise: absent observations (``None``) and unusable values
produce a LOW score whose reasoning states that data is insufficient.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable, Sequence

from hazard_risk.models import (
    CurrentWeather,
    Hazard,
    PrecipitationHistory,
    RiskFactor,
    RiskLevel,
    RiskScore,
    SeismicEvent,
    Storm,
    StormKind,
    WeatherAlert,
)

logger = logging.getLogger(__name__)

MAX_SCORE = 100
DAY_MS = 24 * 60 * 60 * 1000

HEATWAVE_SCORES: dict[str, int] = {"HIGH": 75, "MODERATE": 40, "LOW": 10}

Tables = tuple[dict[RiskLevel, str], dict[RiskLevel, tuple[str, ...]], str]


def level_of(score: float) -> RiskLevel:
    """Shared step function from score to level."""
    if score >= 85:
        return RiskLevel.EXTREME
    if score >= 60:
        return RiskLevel.HIGH
    if score >= 35:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def clamp_score(score: float) -> int:
    return int(max(0, min(MAX_SCORE, score)))


# Reasoning, recommendations, and the insufficient-data message per hazard.

_FLOOD: Tables = (
    {
        RiskLevel.LOW: "Normal precipitation levels",
        RiskLevel.MODERATE: "Elevated precipitation may cause localized flooding",
        RiskLevel.HIGH: "Heavy rainfall accumulation creating significant flood risk",
        RiskLevel.EXTREME: "Extreme rainfall accumulation, flooding likely",
    },
    {
        RiskLevel.LOW: ("Monitor local weather updates",),
        RiskLevel.MODERATE: (
            "Stay informed of weather conditions",
            "Avoid flood-prone areas",
            "Keep emergency kit accessible",
        ),
        RiskLevel.HIGH: (
            "Prepare emergency supplies",
            "Identify evacuation routes",
            "Avoid low-lying areas",
            "Do not attempt to cross flooded roads",
        ),
        RiskLevel.SEVERE: (
            "Evacuate if authorities advise",
            "Move to higher ground immediately",
            "Avoid walking or driving through flood water",
            "Prepare emergency supplies",
        ),
        RiskLevel.EXTREME: (
            "Evacuate if authorities advise",
            "Move to higher ground immediately",
            "Avoid walking or driving through flood water",
            "Prepare emergency supplies",
        ),
    },
    "Insufficient precipitation data available",
)

_WILDFIRE: Tables = (
    {
        RiskLevel.LOW: "Normal fire weather conditions",
        RiskLevel.MODERATE: "Elevated fire risk due to dry and warm conditions",
        RiskLevel.HIGH: "Extreme fire weather: high temp, low humidity, strong winds",
        RiskLevel.EXTREME: "Critical fire weather, any ignition may spread rapidly",
    },
    {
        RiskLevel.LOW: ("Follow local fire advisories",),
        RiskLevel.MODERATE: (
            "Exercise caution with outdoor activities",
            "Ensure fire extinguishers are available",
            "Report any smoke or fire immediately",
        ),
        RiskLevel.HIGH: (
            "Avoid outdoor burning",
            "Clear dry vegetation from property",
            "Have evacuation plan ready",
            "Keep emergency supplies accessible",
        ),
        RiskLevel.EXTREME: (
            "Be prepared to evacuate immediately",
            "Create defensible space around property",
            "Have emergency bag ready",
            "Monitor emergency channels",
        ),
    },
    "Insufficient weather data",
)

_EARTHQUAKE: Tables = (
    {
        RiskLevel.LOW: "No significant seismic events in your area",
        RiskLevel.MODERATE: "Moderate earthquake activity in region",
        RiskLevel.HIGH: "Significant seismic activity detected, aftershocks possible",
        RiskLevel.EXTREME: "Major seismic activity nearby, strong aftershocks likely",
    },
    {
        RiskLevel.LOW: ("Standard earthquake preparedness advised",),
        RiskLevel.MODERATE: (
            "Be aware of seismic activity",
            "Ensure emergency kit is stocked",
            "Know Drop, Cover, Hold On procedure",
        ),
        RiskLevel.HIGH: (
            "Review earthquake safety procedures",
            "Secure heavy furniture and objects",
            "Know your evacuation routes",
            "Keep emergency supplies ready",
        ),
        RiskLevel.EXTREME: (
            "Expect aftershocks - stay alert",
            "Avoid damaged buildings",
            "Check for gas leaks and hazards",
            "Listen to emergency broadcasts",
        ),
    },
    "Seismic data unavailable",
)

_CYCLONE: Tables = (
    {
        RiskLevel.LOW: "No significant storm activity",
        RiskLevel.MODERATE: "Storm conditions present - monitor closely",
        RiskLevel.HIGH: "Active severe storm system in area",
        RiskLevel.EXTREME: "Dangerous storm system in area, damaging winds expected",
    },
    {
        RiskLevel.LOW: ("Stay informed of weather conditions",),
        RiskLevel.MODERATE: (
            "Monitor weather updates",
            "Review emergency plans",
            "Ensure supplies are accessible",
        ),
        RiskLevel.HIGH: (
            "Prepare for possible evacuation",
            "Secure outdoor objects",
            "Stock emergency supplies",
            "Charge all devices",
        ),
        RiskLevel.EXTREME: (
            "Evacuate if instructed by authorities",
            "Seek shelter in a sturdy building",
            "Stay away from windows",
            "Have emergency supplies ready",
        ),
    },
    "Insufficient storm telemetry",
)

_HEATWAVE: Tables = (
    {
        RiskLevel.LOW: "No significant heat stress expected",
        RiskLevel.MODERATE: "Warm conditions, heat stress possible",
        RiskLevel.HIGH: "Heatwave conditions with high risk of heat illness",
        RiskLevel.EXTREME: "Extreme heat, dangerous for all outdoor activity",
    },
    {
        RiskLevel.LOW: ("Stay hydrated",),
        RiskLevel.MODERATE: (
            "Drink water regularly",
            "Limit strenuous activity in the afternoon",
            "Check on elderly neighbours",
        ),
        RiskLevel.HIGH: (
            "Stay indoors during peak heat",
            "Use cooling centres if needed",
            "Never leave children or pets in vehicles",
            "Watch for signs of heat exhaustion",
        ),
        RiskLevel.EXTREME: (
            "Avoid all outdoor exertion",
            "Seek air-conditioned shelter",
            "Call emergency services for heat stroke symptoms",
        ),
    },
    "No heatwave assessment available",
)

_TABLES: dict[Hazard, Tables] = {
    Hazard.FLOOD: _FLOOD,
    Hazard.WILDFIRE: _WILDFIRE,
    Hazard.EARTHQUAKE: _EARTHQUAKE,
    Hazard.CYCLONE: _CYCLONE,
    Hazard.HEATWAVE: _HEATWAVE,
}


def _result(
    hazard: Hazard,
    points: float,
    factors: list[RiskFactor] | None = None,
    reasoning: str | None = None,
) -> RiskScore:
    reasons, recommendations, _ = _TABLES[hazard]
    score = clamp_score(points)
    level = level_of(score)
    return RiskScore(
        hazard=hazard,
        score=score,
        level=level,
        factors=tuple(factors or ()),
        reasoning=reasoning if reasoning is not None else reasons[level],
        recommendations=recommendations[level],
    )


def insufficient_data(hazard: Hazard) -> RiskScore:
    """LOW score for a hazard whose observations are missing."""
    return _result(hazard, 0, reasoning=_TABLES[hazard][2])


def _never_raises(hazard: Hazard) -> Callable[[Callable[..., RiskScore]], Callable[..., RiskScore]]:
    """Turn unusable input into an insufficient-data score."""

    def decorator(fn: Callable[..., RiskScore]) -> Callable[..., RiskScore]:
        @functools.wraps(fn)
        def wrapper(*args: object, **kwargs: object) -> RiskScore:
            try:
                return fn(*args, **kwargs)
            except (TypeError, ValueError, AttributeError):
                logger.warning("Unusable %s input, scoring as LOW", hazard.value, exc_info=True)
                return insufficient_data(hazard)

        return wrapper

    return decorator


@_never_raises(Hazard.FLOOD)
def score_flood(
    precipitation: PrecipitationHistory | None,
    current: CurrentWeather | None = None,
) -> RiskScore:
    """Flood risk from rainfall accumulation, intensity and soil saturation."""
    if precipitation is None:
        return insufficient_data(Hazard.FLOOD)

    points = 0
    factors: list[RiskFactor] = []

    total_7day = precipitation.total_7day or 0.0
    if total_7day > 150:
        points += 40
        factors.append(RiskFactor("7-day accumulation", f"{total_7day:.0f}mm", RiskLevel.HIGH))
    elif total_7day > 100:
        points += 25
        factors.append(RiskFactor("7-day accumulation", f"{total_7day:.0f}mm", RiskLevel.MODERATE))
    elif total_7day > 50:
        points += 10
        factors.append(RiskFactor("7-day accumulation", f"{total_7day:.0f}mm", RiskLevel.LOW))

    total_3day = precipitation.total_3day or 0.0
    if total_3day > 100:
        points += 35
        factors.append(RiskFactor("72-hour rainfall", f"{total_3day:.0f}mm", RiskLevel.HIGH))
    elif total_3day > 60:
        points += 20
        factors.append(RiskFactor("72-hour rainfall", f"{total_3day:.0f}mm", RiskLevel.MODERATE))
    elif total_3day > 30:
        points += 8
        factors.append(RiskFactor("72-hour rainfall", f"{total_3day:.0f}mm", RiskLevel.LOW))

    intensity = current.precipitation if current is not None else 0.0
    if intensity > 10:
        points += 25
        factors.append(RiskFactor("Current intensity", f"{intensity:.1f}mm/hr", RiskLevel.HIGH))
    elif intensity > 5:
        points += 15
        factors.append(RiskFactor("Current intensity", f"{intensity:.1f}mm/hr", RiskLevel.MODERATE))

    # Soil saturation proxy
    rain_days = sum(1 for mm in precipitation.daily_precipitation if mm > 1)
    if rain_days >= 5:
        points += 15
        factors.append(RiskFactor("Soil saturation", f"{rain_days} rain days", RiskLevel.HIGH))
    elif rain_days >= 3:
        points += 8
        factors.append(RiskFactor("Soil saturation", f"{rain_days} rain days", RiskLevel.MODERATE))

    return _result(Hazard.FLOOD, points, factors)


@_never_raises(Hazard.WILDFIRE)
def score_wildfire(
    current: CurrentWeather | None,
    precipitation: PrecipitationHistory | None = None,
) -> RiskScore:
    """Fire weather risk from heat, dryness, wind and rain deficit."""
    if current is None:
        return insufficient_data(Hazard.WILDFIRE)

    points = 0
    factors: list[RiskFactor] = []

    temp = current.temperature
    if temp > 40:
        points += 30
        factors.append(RiskFactor("Temperature", f"{temp:.1f}°C", RiskLevel.HIGH))
    elif temp > 35:
        points += 20
        factors.append(RiskFactor("Temperature", f"{temp:.1f}°C", RiskLevel.MODERATE))
    elif temp > 30:
        points += 10
        factors.append(RiskFactor("Temperature", f"{temp:.1f}°C", RiskLevel.LOW))

    humidity = current.humidity
    if humidity < 20:
        points += 30
        factors.append(RiskFactor("Humidity", f"{humidity:.0f}%", RiskLevel.HIGH))
    elif humidity < 30:
        points += 20
        factors.append(RiskFactor("Humidity", f"{humidity:.0f}%", RiskLevel.MODERATE))
    elif humidity < 40:
        points += 10
        factors.append(RiskFactor("Humidity", f"{humidity:.0f}%", RiskLevel.LOW))

    wind = current.wind_speed_kmh
    if wind > 40:
        points += 25
        factors.append(RiskFactor("Wind speed", f"{wind:.0f} km/h", RiskLevel.HIGH))
    elif wind > 25:
        points += 15
        factors.append(RiskFactor("Wind speed", f"{wind:.0f} km/h", RiskLevel.MODERATE))
    elif wind > 15:
        points += 5
        factors.append(RiskFactor("Wind speed", f"{wind:.0f} km/h", RiskLevel.LOW))

    if precipitation is not None:
        total_7day = precipitation.total_7day or 0.0
        if total_7day < 2:
            points += 20
            factors.append(RiskFactor("Rain deficit", "Dry conditions", RiskLevel.HIGH))
        elif total_7day < 10:
            points += 10
            factors.append(RiskFactor("Rain deficit", "Low precipitation", RiskLevel.MODERATE))

    return _result(Hazard.WILDFIRE, points, factors)


@_never_raises(Hazard.EARTHQUAKE)
def score_earthquake(
    events: Sequence[SeismicEvent] | None,
    now_ms: int | None = None,
) -> RiskScore:
    """Seismic risk from the strongest nearby event, swarm activity and tsunami potential.

    *events* are expected to be already filtered to the search radius.
    """
    if events is None:
        return insufficient_data(Hazard.EARTHQUAKE)
    if not events:
        return _result(
            Hazard.EARTHQUAKE, 0, reasoning="No significant seismic activity detected nearby"
        )
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    points = 0
    factors: list[RiskFactor] = []

    strongest = max(events, key=lambda ev: ev.magnitude)
    mag = strongest.magnitude
    if mag >= 6:
        points += 40
        factors.append(RiskFactor("Nearby major quake", f"M{mag:.1f}", RiskLevel.HIGH))
    elif mag >= 5:
        points += 25
        factors.append(RiskFactor("Moderate quake nearby", f"M{mag:.1f}", RiskLevel.MODERATE))
    elif mag >= 4:
        points += 10
        factors.append(RiskFactor("Light quake detected", f"M{mag:.1f}", RiskLevel.LOW))

    distance = strongest.distance_km
    if distance < 100:
        points += 25
        factors.append(RiskFactor("Proximity", f"{distance:.0f}km away", RiskLevel.HIGH))
    elif distance < 300:
        points += 15
        factors.append(RiskFactor("Proximity", f"{distance:.0f}km away", RiskLevel.MODERATE))
    elif distance < 500:
        points += 5
        factors.append(RiskFactor("Proximity", f"{distance:.0f}km away", RiskLevel.LOW))

    # Aftershock / swarm indicator
    recent = sum(
        1 for ev in events if now_ms - ev.time_ms < DAY_MS and ev.distance_km < 500
    )
    if recent >= 5:
        points += 20
        factors.append(RiskFactor("Seismic swarm", f"{recent} events/24h", RiskLevel.HIGH))
    elif recent >= 3:
        points += 10
        factors.append(RiskFactor("Elevated activity", f"{recent} events/24h", RiskLevel.MODERATE))

    # Scans the whole list, not only the strongest event
    if any(ev.tsunami and ev.magnitude >= 7 for ev in events):
        points += 15
        factors.append(RiskFactor("Tsunami potential", "Detected", RiskLevel.HIGH))

    return _result(Hazard.EARTHQUAKE, points, factors)


@_never_raises(Hazard.CYCLONE)
def score_cyclone(
    storms: Sequence[Storm] | None,
    alerts: Sequence[WeatherAlert] | None,
) -> RiskScore:
    """Storm/cyclone risk from the strongest active storm and weather alerts."""
    if storms is None and alerts is None:
        return insufficient_data(Hazard.CYCLONE)
    storms = storms or ()
    alerts = alerts or ()
    if not storms and not alerts:
        return _result(Hazard.CYCLONE, 0, reasoning="No active storm systems detected")

    points = 0
    factors: list[RiskFactor] = []

    if storms:
        strongest = max(storms, key=lambda s: s.wind_speed_kmh)
        if strongest.kind is StormKind.HURRICANE and strongest.category >= 3:
            points += 50
            factors.append(RiskFactor("Major storm", f"Cat {strongest.category}", RiskLevel.HIGH))
        elif strongest.kind is StormKind.HURRICANE:
            points += 35
            factors.append(RiskFactor("Hurricane", f"Cat {strongest.category}", RiskLevel.MODERATE))
        elif strongest.kind is StormKind.TROPICAL_STORM:
            points += 20
            factors.append(
                RiskFactor("Tropical storm", f"{strongest.wind_speed_kmh:.0f} km/h", RiskLevel.MODERATE)
            )

        gusts = strongest.wind_gusts_kmh
        if gusts > 120:
            points += 25
            factors.append(RiskFactor("Wind gusts", f"{gusts:.0f} km/h", RiskLevel.HIGH))
        elif gusts > 80:
            points += 15
            factors.append(RiskFactor("Wind gusts", f"{gusts:.0f} km/h", RiskLevel.MODERATE))

    if alerts:
        severe = [a for a in alerts if a.severity is RiskLevel.HIGH]
        if severe:
            points += 20
            factors.append(RiskFactor("Severe alerts", f"{len(severe)} active", RiskLevel.HIGH))
        else:
            points += 10
            factors.append(RiskFactor("Weather alerts", f"{len(alerts)} active", RiskLevel.MODERATE))

    return _result(Hazard.CYCLONE, points, factors)


@_never_raises(Hazard.HEATWAVE)
def score_heatwave(level: RiskLevel | str | None) -> RiskScore:
    """Map an externally assessed heatwave level onto the common 0-100 scale."""
    if level is None:
        return insufficient_data(Hazard.HEATWAVE)
    label = level.value if isinstance(level, RiskLevel) else str(level).strip().upper()
    points = HEATWAVE_SCORES.get(label, 0)
    factors = [RiskFactor("Heatwave level", label, level_of(points))] if points else []
    return _result(Hazard.HEATWAVE, points, factors)


def classify_heatwave(temperature: float | None, humidity: float | None) -> RiskLevel | None:
    """Qualitative heatwave level from air temperature (°C) and humidity (%)."""
    if temperature is None or humidity is None:
        return None
    if temperature >= 40 or (temperature >= 35 and humidity >= 60):
        return RiskLevel.HIGH
    if temperature >= 32 or (temperature >= 28 and humidity >= 70):
        return RiskLevel.MODERATE
    return RiskLevel.LOW
