"""FastAPI wrapper for the hazard risk engine."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from hazard_risk import __version__
from hazard_risk.cache import ObservationCache
from hazard_risk.config import HazardRiskConfig
from hazard_risk.exporters import assessment_to_dict
from hazard_risk.http import create_session
from hazard_risk.models import Location
from hazard_risk.pipeline import run_assessment, run_seismic_report

logger = logging.getLogger(__name__)

HeatwaveLevel = Literal["LOW", "MODERATE", "HIGH"]
EventSort = Literal["distance", "time", "magnitude"]


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
    """Create the process-lifetime cache and HTTP session."""
    config = HazardRiskConfig()
    application.state.config = config
    application.state.cache = ObservationCache(ttl_seconds=config.cache_ttl_seconds)
    application.state.session = create_session()
    application.state.start_time = datetime.now(tz=timezone.utc)
    application.state.last_run = None
    application.state.run_count = 0
    yield
    application.state.session.close()


app = FastAPI(
    title="Hazard Risk API",
    description="Explainable multi-hazard risk scores, composite index and alerts.",
    version=__version__,
    lifespan=lifespan,
)


def _record_run() -> None:
    app.state.last_run = datetime.now(tz=timezone.utc)
    app.state.run_count += 1


@app.get("/health")
def health() -> dict[str, Any]:
    """Server health check with uptime, version, run count and cache size."""
    now = datetime.now(tz=timezone.utc)
    return {
        "status": "ok",
        "version": __version__,
        "uptime_seconds": round((now - app.state.start_time).total_seconds(), 1),
        "last_run": app.state.last_run.isoformat() if app.state.last_run else None,
        "run_count": app.state.run_count,
        "cached_entries": len(app.state.cache),
    }


@app.get("/risk")
def get_risk(
    lat: Annotated[float, Query(ge=-90.0, le=90.0, description="Latitude.")],
    lon: Annotated[float, Query(ge=-180.0, le=180.0, description="Longitude.")],
    heatwave: Annotated[
        HeatwaveLevel | None,
        Query(description="Externally assessed heatwave level."),
    ] = None,
) -> JSONResponse:
    """Score all hazards for a location.

    The response carries ``data_status`` per dataset and a ``degraded``
    flag when any dataset was stale or unavailable.
    """
    try:
        assessment = run_assessment(
            Location(lat, lon),
            config=app.state.config,
            cache=app.state.cache,
            session=app.state.session,
            heatwave_level=heatwave,
        )
    except Exception as exc:
        logger.exception("Assessment failed")
        return JSONResponse(
            status_code=502,
            content={"detail": f"Upstream assessment error: {exc}"},
        )

    _record_run()
    return JSONResponse(content=assessment_to_dict(assessment))


@app.get("/risk/seismic")
def get_seismic_risk(
    lat: Annotated[float, Query(ge=-90.0, le=90.0, description="Latitude.")],
    lon: Annotated[float, Query(ge=-180.0, le=180.0, description="Longitude.")],
    sort: Annotated[
        EventSort,
        Query(description="Event order: nearest, most recent or strongest first."),
    ] = "distance",
) -> JSONResponse:
    """Score earthquake risk only, with the nearby event list.

    Each event carries its magnitude class and a "time ago" label.
    """
    try:
        report = run_seismic_report(
            Location(lat, lon),
            config=app.state.config,
            cache=app.state.cache,
            session=app.state.session,
            sort_by=sort,
        )
    except Exception as exc:
        logger.exception("Seismic report failed")
        return JSONResponse(
            status_code=502,
            content={"detail": f"Upstream assessment error: {exc}"},
        )

    _record_run()
    return JSONResponse(content=assessment_to_dict(report))
