"""Tests for the FastAPI wrapper."""

from __future__ import annotations

from collections.abc import Callable, Generator
from unittest.mock import patch

import pytest
import responses
from fastapi.testclient import TestClient

from hazard_risk.api import app

TOKYO = {"lat": 35.6762, "lon": 139.6503}


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """TestClient with lifespan entered so app.state is initialised."""
    with TestClient(app) as c:
        yield c


class TestHealthEndpoint:
    def test_returns_ok(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert "version" in data
        assert "uptime_seconds" in data
        assert data["run_count"] == 0
        assert data["last_run"] is None
        assert data["cached_entries"] == 0


class TestRiskEndpoint:
    @responses.activate
    def test_full_assessment(self, client: TestClient, mock_providers: Callable[..., None]) -> None:
        """GET /risk returns scores, index, alerts and data status."""
        mock_providers()
        resp = client.get("/risk", params=TOKYO)

        assert resp.status_code == 200
        data = resp.json()
        assert set(data["scores"]) == {"flood", "wildfire", "earthquake", "cyclone", "heatwave"}
        assert data["scores"]["earthquake"]["level"] == "HIGH"
        assert data["index"]["primary_concern"] == "earthquake"
        assert data["alerts"][0]["type"] == "earthquake"
        assert data["data_status"]["seismic"] == "fresh"
        assert data["degraded"] is False

        health = client.get("/health").json()
        assert health["run_count"] == 1
        assert health["cached_entries"] == 3

    @responses.activate
    def test_heatwave_param(self, client: TestClient, mock_providers: Callable[..., None]) -> None:
        mock_providers()
        resp = client.get("/risk", params={**TOKYO, "heatwave": "MODERATE"})
        assert resp.status_code == 200
        assert resp.json()["scores"]["heatwave"]["score"] == 40

    @responses.activate
    def test_degraded_flag(self, client: TestClient, mock_providers: Callable[..., None]) -> None:
        """A failing provider still yields 200 with degraded status."""
        mock_providers(forecast=500)
        resp = client.get("/risk", params=TOKYO)

        assert resp.status_code == 200
        data = resp.json()
        assert data["data_status"]["storm"] == "unavailable"
        assert data["degraded"] is True
        assert data["storm_telemetry"] is None

    @responses.activate
    def test_storms_carry_compass_direction(
        self,
        client: TestClient,
        mock_providers: Callable[..., None],
        sample_forecast_response: dict,
    ) -> None:
        """Detected storms include a 16-point direction; events a time-ago label."""
        sample_forecast_response["current"].update(
            {"wind_speed_10m": 70.0, "wind_gusts_10m": 95.0, "wind_direction_10m": 90}
        )
        mock_providers(forecast=sample_forecast_response)
        resp = client.get("/risk", params=TOKYO)

        assert resp.status_code == 200
        data = resp.json()
        (storm,) = data["storm_telemetry"]["storms"]
        assert storm["kind"] == "TropicalStorm"
        assert storm["direction"] == "E"
        assert "time_ago" in data["seismic_events"][0]
        assert data["seismic_events"][0]["magnitude_class"] == "STRONG"

    def test_invalid_heatwave_returns_422(self, client: TestClient) -> None:
        resp = client.get("/risk", params={**TOKYO, "heatwave": "SCORCHING"})
        assert resp.status_code == 422

    def test_latitude_out_of_range_returns_422(self, client: TestClient) -> None:
        resp = client.get("/risk", params={"lat": 95.0, "lon": 0.0})
        assert resp.status_code == 422

    def test_missing_coordinates_returns_422(self, client: TestClient) -> None:
        resp = client.get("/risk")
        assert resp.status_code == 422

    def test_unexpected_error_returns_502(self, client: TestClient) -> None:
        with patch("hazard_risk.api.run_assessment", side_effect=RuntimeError("boom")):
            resp = client.get("/risk", params=TOKYO)
        assert resp.status_code == 502
        assert "boom" in resp.json()["detail"]


class TestSeismicEndpoint:
    @responses.activate
    def test_seismic_only(self, client: TestClient, mock_providers: Callable[..., None]) -> None:
        mock_providers()
        resp = client.get("/risk/seismic", params=TOKYO)

        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "fresh"
        assert [ev["id"] for ev in data["events"]] == ["us7000near", "us7000mid1", "us7000far1"]
        assert data["score"]["hazard"] == "earthquake"
        assert data["score"]["score"] == 65
        near = data["events"][0]
        assert near["magnitude_class"] == "STRONG"
        assert near["magnitude_description"] == "Can cause damage to buildings"
        assert near["time_ago"].endswith("d ago")

    @responses.activate
    def test_sort_by_magnitude(
        self, client: TestClient, mock_providers: Callable[..., None]
    ) -> None:
        mock_providers()
        resp = client.get("/risk/seismic", params={**TOKYO, "sort": "magnitude"})
        assert resp.status_code == 200
        magnitudes = [ev["magnitude"] for ev in resp.json()["events"]]
        assert magnitudes == [6.1, 5.2, 4.8]

    def test_invalid_sort_returns_422(self, client: TestClient) -> None:
        resp = client.get("/risk/seismic", params={**TOKYO, "sort": "depth"})
        assert resp.status_code == 422

    def test_unexpected_error_returns_502(self, client: TestClient) -> None:
        with patch("hazard_risk.api.run_seismic_report", side_effect=RuntimeError("boom")):
            resp = client.get("/risk/seismic", params=TOKYO)
        assert resp.status_code == 502
