"""Tests for per-hazard scorers and the shared level mapping."""

from __future__ import annotations

import pytest

from conftest import HOUR_MS, NOW_MS
from hazard_risk.models import (
    CurrentWeather,
    Hazard,
    PrecipitationHistory,
    RiskLevel,
    Storm,
    StormKind,
    WeatherAlert,
)
from hazard_risk.scoring import (
    classify_heatwave,
    clamp_score,
    insufficient_data,
    level_of,
    score_cyclone,
    score_earthquake,
    score_flood,
    score_heatwave,
    score_wildfire,
)


def _history(total_7day: float, total_3day: float, daily=()) -> PrecipitationHistory:
    return PrecipitationHistory(
        dates=(),
        daily_precipitation=tuple(daily),
        total_7day=total_7day,
        total_3day=total_3day,
        consecutive_dry_days=0,
    )


def _alert(severity: RiskLevel) -> WeatherAlert:
    return WeatherAlert(
        id="a", type="WIND", severity=severity, title="t", description="d", recommendation="r"
    )


class TestLevelOf:
    @pytest.mark.parametrize(
        "score, level",
        [
            (0, RiskLevel.LOW),
            (34, RiskLevel.LOW),
            (35, RiskLevel.MODERATE),
            (59, RiskLevel.MODERATE),
            (60, RiskLevel.HIGH),
            (84, RiskLevel.HIGH),
            (85, RiskLevel.EXTREME),
            (100, RiskLevel.EXTREME),
        ],
    )
    def test_boundaries(self, score, level):
        assert level_of(score) is level

    def test_never_returns_severe(self):
        assert all(level_of(s) is not RiskLevel.SEVERE for s in range(101))

    def test_clamp(self):
        assert clamp_score(-5) == 0
        assert clamp_score(140) == 100
        assert clamp_score(42) == 42


class TestScoreFlood:
    def test_extreme_rainfall(self, wet_week):
        current = CurrentWeather(temperature=18, humidity=95, precipitation=12.0)
        result = score_flood(wet_week, current)
        assert result.hazard is Hazard.FLOOD
        assert result.score == 100
        assert result.level is RiskLevel.EXTREME
        names = [f.name for f in result.factors]
        assert names == [
            "7-day accumulation",
            "72-hour rainfall",
            "Current intensity",
            "Soil saturation",
        ]
        assert "Evacuate if authorities advise" in result.recommendations

    def test_dry_week_is_low(self):
        result = score_flood(_history(0.0, 0.0, [0.0] * 7))
        assert result.score == 0
        assert result.level is RiskLevel.LOW
        assert result.reasoning == "Normal precipitation levels"
        assert result.factors == ()

    def test_intermediate_tiers(self):
        daily = [0, 0, 0, 0, 10, 10, 10]
        result = score_flood(_history(120.0, 70.0, daily))
        # 25 (7-day) + 20 (72h) + 8 (3 rain days)
        assert result.score == 53
        assert result.level is RiskLevel.MODERATE

    def test_missing_current_weather_skips_intensity(self, wet_week):
        result = score_flood(wet_week)
        assert result.score == 90
        assert "Current intensity" not in [f.name for f in result.factors]

    def test_none_is_insufficient_data(self):
        result = score_flood(None)
        assert result.score == 0
        assert result.level is RiskLevel.LOW
        assert result.reasoning == "Insufficient precipitation data available"

    def test_more_rain_never_lowers_score(self):
        previous = -1
        for total in range(0, 400, 10):
            score = score_flood(_history(total, total / 2, [total / 7] * 7)).score
            assert score >= previous
            previous = score

    def test_bad_input_never_raises(self):
        result = score_flood(_history("lots", 0.0))
        assert result.score == 0
        assert result.level is RiskLevel.LOW


class TestScoreWildfire:
    def test_critical_fire_weather(self):
        current = CurrentWeather(temperature=42, humidity=15, wind_speed_kmh=45)
        result = score_wildfire(current, _history(1.0, 0.0))
        assert result.score == 100
        assert result.level is RiskLevel.EXTREME
        assert [f.impact for f in result.factors] == [RiskLevel.HIGH] * 4

    def test_mild_conditions(self, calm_weather):
        result = score_wildfire(calm_weather, _history(30.0, 10.0))
        assert result.score == 0
        assert result.reasoning == "Normal fire weather conditions"

    def test_without_precipitation_skips_deficit(self):
        current = CurrentWeather(temperature=36, humidity=25, wind_speed_kmh=30)
        result = score_wildfire(current)
        assert result.score == 55
        assert result.level is RiskLevel.MODERATE

    def test_low_precipitation_tier(self):
        current = CurrentWeather(temperature=31, humidity=35, wind_speed_kmh=20)
        result = score_wildfire(current, _history(5.0, 0.0))
        # 10 + 10 + 5 + 10
        assert result.score == 35

    def test_none_is_insufficient_data(self):
        result = score_wildfire(None)
        assert result.score == 0
        assert result.reasoning == "Insufficient weather data"

    def test_hotter_never_lowers_score(self):
        scores = [
            score_wildfire(CurrentWeather(temperature=t, humidity=30)).score
            for t in range(0, 50)
        ]
        assert scores == sorted(scores)

    def test_bad_input_never_raises(self):
        result = score_wildfire(CurrentWeather(temperature="hot", humidity=10))
        assert result.score == 0
        assert result.level is RiskLevel.LOW


class TestScoreEarthquake:
    def test_strong_nearby_quake(self, make_event):
        event = make_event(magnitude=6.5, distance_km=50, time_ms=NOW_MS - 2 * HOUR_MS, tsunami=True)
        result = score_earthquake([event], now_ms=NOW_MS)
        # 40 + 25, one recent event, tsunami needs M7+
        assert result.score == 65
        assert result.level is RiskLevel.HIGH
        assert result.reasoning == "Significant seismic activity detected, aftershocks possible"

    def test_tsunami_bonus_scans_all_events(self, make_event):
        events = [
            make_event(magnitude=7.2, distance_km=450, tsunami=True, id="far"),
            make_event(magnitude=5.0, distance_km=20, id="near"),
        ]
        result = score_earthquake(events, now_ms=NOW_MS)
        # strongest is M7.2 at 450km: 40 + 5, plus tsunami 15
        assert result.score == 60
        assert "Tsunami potential" in [f.name for f in result.factors]

    def test_swarm(self, make_event):
        recent = NOW_MS - HOUR_MS
        events = [make_event(magnitude=4.2, distance_km=80, time_ms=recent, id=str(i)) for i in range(5)]
        result = score_earthquake(events, now_ms=NOW_MS)
        # 10 + 25 + 20
        assert result.score == 55
        assert "Seismic swarm" in [f.name for f in result.factors]

    def test_elevated_activity(self, make_event):
        recent = NOW_MS - HOUR_MS
        events = [make_event(magnitude=3.0, distance_km=350, time_ms=recent, id=str(i)) for i in range(3)]
        result = score_earthquake(events, now_ms=NOW_MS)
        assert result.score == 15

    def test_old_events_are_not_recent(self, make_event):
        events = [make_event(time_ms=NOW_MS - 25 * HOUR_MS, id=str(i)) for i in range(6)]
        result = score_earthquake(events, now_ms=NOW_MS)
        assert all(f.name != "Seismic swarm" for f in result.factors)

    def test_empty_list_is_quiet(self):
        result = score_earthquake([], now_ms=NOW_MS)
        assert result.score == 0
        assert result.level is RiskLevel.LOW
        assert result.reasoning == "No significant seismic activity detected nearby"

    def test_none_is_insufficient_data(self):
        result = score_earthquake(None)
        assert result.score == 0
        assert result.reasoning == "Seismic data unavailable"

    def test_bigger_quake_never_lowers_score(self, make_event):
        scores = [
            score_earthquake([make_event(magnitude=m / 2, distance_km=150)], now_ms=NOW_MS).score
            for m in range(0, 20)
        ]
        assert scores == sorted(scores)


class TestScoreCyclone:
    def test_major_hurricane_with_alerts(self):
        storm = Storm(
            kind=StormKind.HURRICANE, category=4, wind_speed_kmh=215, wind_gusts_kmh=260
        )
        result = score_cyclone([storm], [_alert(RiskLevel.HIGH)])
        # 50 + 25 + 20
        assert result.score == 95
        assert result.level is RiskLevel.EXTREME

    def test_minor_hurricane(self):
        storm = Storm(kind=StormKind.HURRICANE, category=1, wind_speed_kmh=125, wind_gusts_kmh=100)
        result = score_cyclone([storm], [])
        assert result.score == 50

    def test_tropical_storm(self):
        storm = Storm(kind=StormKind.TROPICAL_STORM, wind_speed_kmh=70, wind_gusts_kmh=70)
        result = score_cyclone([storm], [_alert(RiskLevel.MODERATE)])
        # 20 + 10
        assert result.score == 30
        assert result.level is RiskLevel.LOW

    def test_strongest_storm_by_sustained_wind(self):
        weak = Storm(kind=StormKind.DEPRESSION, wind_speed_kmh=45, wind_gusts_kmh=130)
        strong = Storm(kind=StormKind.TROPICAL_STORM, wind_speed_kmh=80, wind_gusts_kmh=85)
        result = score_cyclone([weak, strong], None)
        assert result.score == 35

    def test_alerts_only(self):
        result = score_cyclone(None, [_alert(RiskLevel.MODERATE), _alert(RiskLevel.MODERATE)])
        assert result.score == 10
        assert result.factors[0].value == "2 active"

    def test_nothing_active(self):
        result = score_cyclone([], [])
        assert result.score == 0
        assert result.reasoning == "No active storm systems detected"

    def test_none_is_insufficient_data(self):
        result = score_cyclone(None, None)
        assert result.reasoning == "Insufficient storm telemetry"


class TestHeatwave:
    @pytest.mark.parametrize(
        "level, score, expected",
        [
            ("HIGH", 75, RiskLevel.HIGH),
            ("MODERATE", 40, RiskLevel.MODERATE),
            ("LOW", 10, RiskLevel.LOW),
            (RiskLevel.HIGH, 75, RiskLevel.HIGH),
            ("moderate", 40, RiskLevel.MODERATE),
            ("UNKNOWN", 0, RiskLevel.LOW),
        ],
    )
    def test_mapping(self, level, score, expected):
        result = score_heatwave(level)
        assert result.score == score
        assert result.level is expected

    def test_none_is_insufficient_data(self):
        result = score_heatwave(None)
        assert result.score == 0
        assert result.reasoning == "No heatwave assessment available"

    @pytest.mark.parametrize(
        "temperature, humidity, expected",
        [
            (41, 10, RiskLevel.HIGH),
            (36, 65, RiskLevel.HIGH),
            (36, 30, RiskLevel.MODERATE),
            (29, 75, RiskLevel.MODERATE),
            (25, 90, RiskLevel.LOW),
            (None, 50, None),
        ],
    )
    def test_classify(self, temperature, humidity, expected):
        assert classify_heatwave(temperature, humidity) is expected


class TestInsufficientData:
    @pytest.mark.parametrize("hazard", list(Hazard))
    def test_every_hazard_has_a_message(self, hazard):
        result = insufficient_data(hazard)
        assert result.hazard is hazard
        assert result.score == 0
        assert result.level is RiskLevel.LOW
        assert result.reasoning
        assert result.recommendations
