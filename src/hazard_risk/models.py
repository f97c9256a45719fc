"""Data models for the hazard risk engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from hazard_risk.geo import compass_direction


class Hazard(str, Enum):
    """Hazards scored by the engine, in composite iteration order."""

    FLOOD = "flood"
    WILDFIRE = "wildfire"
    EARTHQUAKE = "earthquake"
    CYCLONE = "cyclone"
    HEATWAVE = "heatwave"


HAZARD_ORDER: tuple[Hazard, ...] = tuple(Hazard)

HAZARD_LABELS: dict[Hazard, str] = {
    Hazard.FLOOD: "Flooding",
    Hazard.WILDFIRE: "Wildfire",
    Hazard.EARTHQUAKE: "Earthquake",
    Hazard.CYCLONE: "Storm/Cyclone",
    Hazard.HEATWAVE: "Extreme Heat",
}


class RiskLevel(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    SEVERE = "SEVERE"
    EXTREME = "EXTREME"

    @property
    def label(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        """Sort key: 0 is most severe."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[RiskLevel, int] = {
    RiskLevel.EXTREME: 0,
    RiskLevel.SEVERE: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.MODERATE: 3,
    RiskLevel.LOW: 4,
}


@dataclass(frozen=True)
class Location:
    """A WGS84 point."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")


@dataclass(frozen=True)
class SeismicEvent:
    """A single earthquake from the USGS catalog, relative to a location."""

    id: str
    magnitude: float
    magnitude_type: str
    place: str
    time_ms: int
    depth_km: float
    latitude: float
    longitude: float
    distance_km: float
    tsunami: bool = False
    alert_level: str | None = None
    significance: int = 0


@dataclass(frozen=True)
class MagnitudeClass:
    """Descriptive bucket for an earthquake magnitude."""

    level: str
    description: str


@dataclass(frozen=True)
class CurrentWeather:
    """Current conditions snapshot from the forecast service."""

    temperature: float
    humidity: float
    apparent_temperature: float | None = None
    precipitation: float = 0.0
    cloud_cover: float | None = None
    wind_speed_kmh: float = 0.0
    wind_gusts_kmh: float = 0.0
    wind_direction_deg: float = 0.0
    weather_code: int = 0
    pressure_msl: float | None = None


class StormKind(str, Enum):
    SEVERE_WEATHER = "SevereWeather"
    DEPRESSION = "Depression"
    TROPICAL_STORM = "TropicalStorm"
    HURRICANE = "Hurricane"


@dataclass(frozen=True)
class Storm:
    """A detected storm system. Only hurricanes carry a 1-5 category."""

    kind: StormKind
    wind_speed_kmh: float
    wind_gusts_kmh: float
    direction_deg: float = 0.0
    category: int | None = None
    pressure_msl: float | None = None

    def __post_init__(self) -> None:
        if self.kind is StormKind.HURRICANE:
            if self.category is None or not 1 <= self.category <= 5:
                raise ValueError(f"Hurricane category must be 1-5, got {self.category}")
        elif self.category is not None:
            raise ValueError(f"{self.kind.value} cannot carry a category")

    @property
    def direction(self) -> str:
        return compass_direction(self.direction_deg)


@dataclass(frozen=True)
class WeatherAlert:
    """A provider-derived severe weather warning."""

    id: str
    type: str
    severity: RiskLevel
    title: str
    description: str
    recommendation: str


@dataclass(frozen=True)
class StormTelemetry:
    """Storms, weather alerts, and the current snapshot for a location."""

    alerts: tuple[WeatherAlert, ...] = ()
    storms: tuple[Storm, ...] = ()
    current: CurrentWeather | None = None


@dataclass(frozen=True)
class PrecipitationHistory:
    """Daily precipitation series (oldest first) with derived totals."""

    dates: tuple[str, ...]
    daily_precipitation: tuple[float, ...]
    total_7day: float
    total_3day: float
    consecutive_dry_days: int


@dataclass(frozen=True)
class RiskFactor:
    """One contribution to a hazard score."""

    name: str
    value: str
    impact: RiskLevel


@dataclass(frozen=True)
class RiskScore:
    """Bounded, explained score for a single hazard."""

    hazard: Hazard
    score: int
    level: RiskLevel
    factors: tuple[RiskFactor, ...] = ()
    reasoning: str = ""
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True)
class CompositeRiskIndex:
    """Weighted, amplified combination of all hazard scores."""

    score: int
    level: RiskLevel
    primary_concern: str
    breakdown: dict[str, int] = field(default_factory=dict)
    weights: dict[str, float] = field(default_factory=dict)
    high_risk_count: int = 0


@dataclass(frozen=True)
class Alert:
    """A user-facing alert for a hazard at or above MODERATE."""

    type: str
    severity: str
    message: str


@dataclass(frozen=True)
class HazardAssessment:
    """Everything produced by one refresh cycle for a location."""

    location: Location
    assessed_at: str  # ISO 8601, UTC
    scores: dict[str, RiskScore]
    index: CompositeRiskIndex
    alerts: tuple[Alert, ...]
    data_status: dict[str, str]  # dataset -> "fresh" | "stale" | "unavailable"
    seismic_events: tuple[SeismicEvent, ...] = ()
    storm_telemetry: StormTelemetry | None = None
    precipitation: PrecipitationHistory | None = None

    @property
    def degraded(self) -> bool:
        """True when any dataset was served stale or is missing."""
        return any(status != "fresh" for status in self.data_status.values())


@dataclass(frozen=True)
class SeismicReport:
    """Result of a seismic-only refresh."""

    location: Location
    assessed_at: str
    events: tuple[SeismicEvent, ...]
    score: RiskScore
    status: str
