"""Shared fixtures for hazard_risk tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
import responses

from hazard_risk.config import HazardRiskConfig
from hazard_risk.fetchers.open_meteo import OPEN_METEO_FORECAST_API
from hazard_risk.fetchers.usgs import USGS_EVENT_API
from hazard_risk.models import (
    CurrentWeather,
    Location,
    PrecipitationHistory,
    SeismicEvent,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"

NOW_MS = 1_760_800_000_000
HOUR_MS = 3_600_000


class FakeClock:
    """Manually advanced stand-in for time.time."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def sample_usgs_response() -> dict:
    return json.loads((FIXTURES_DIR / "usgs_sample.json").read_text())


@pytest.fixture
def sample_forecast_response() -> dict:
    return json.loads((FIXTURES_DIR / "forecast_sample.json").read_text())


@pytest.fixture
def sample_daily_response() -> dict:
    return json.loads((FIXTURES_DIR / "daily_sample.json").read_text())


@pytest.fixture
def tokyo() -> Location:
    return Location(35.6762, 139.6503)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fast_config() -> HazardRiskConfig:
    """Config with a short timeout so failing fetches settle quickly."""
    return HazardRiskConfig(request_timeout=2)


@pytest.fixture
def make_event() -> Callable[..., SeismicEvent]:
    """Factory for SeismicEvent with sensible defaults."""

    def _make(
        magnitude: float = 4.5,
        distance_km: float = 250.0,
        time_ms: int = NOW_MS - 48 * HOUR_MS,
        tsunami: bool = False,
        id: str = "ev",
    ) -> SeismicEvent:
        return SeismicEvent(
            id=id,
            magnitude=magnitude,
            magnitude_type="mb",
            place="Test region",
            time_ms=time_ms,
            depth_km=10.0,
            latitude=0.0,
            longitude=0.0,
            distance_km=distance_km,
            tsunami=tsunami,
        )

    return _make


@pytest.fixture
def calm_weather() -> CurrentWeather:
    return CurrentWeather(
        temperature=22.0,
        humidity=60.0,
        precipitation=0.0,
        wind_speed_kmh=8.0,
        wind_gusts_kmh=15.0,
    )


@pytest.fixture
def wet_week() -> PrecipitationHistory:
    """Scenario series: 160mm over 7 days, 110mm over 3 days."""
    return PrecipitationHistory(
        dates=(),
        daily_precipitation=(5.0, 3.0, 8.0, 20.0, 15.0, 30.0, 12.0),
        total_7day=160.0,
        total_3day=110.0,
        consecutive_dry_days=0,
    )


@pytest.fixture
def mock_providers(
    sample_usgs_response: dict,
    sample_forecast_response: dict,
    sample_daily_response: dict,
) -> Callable[..., None]:
    """Register mocked USGS and Open-Meteo responses.

    Call inside a ``@responses.activate`` test. Pass a status code instead
    of a payload to make that provider fail.
    """

    def _register(
        usgs: dict | int | None = None,
        forecast: dict | int | None = None,
        daily: dict | int | None = None,
    ) -> None:
        usgs = sample_usgs_response if usgs is None else usgs
        forecast = sample_forecast_response if forecast is None else forecast
        daily = sample_daily_response if daily is None else daily

        if isinstance(usgs, int):
            responses.add(responses.GET, USGS_EVENT_API, status=usgs)
        else:
            responses.add(responses.GET, USGS_EVENT_API, json=usgs, status=200)

        def open_meteo(request):
            payload = daily if "daily=" in request.url else forecast
            if isinstance(payload, int):
                return payload, {}, json.dumps({"error": True, "reason": "mocked"})
            return 200, {}, json.dumps(payload)

        responses.add_callback(
            responses.GET,
            OPEN_METEO_FORECAST_API,
            callback=open_meteo,
            content_type="application/json",
        )

    return _register
