"""Assessment orchestrator: ingest -> score -> combine -> alert."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from requests import Session

from hazard_risk.alerts import derive_alerts
from hazard_risk.cache import ObservationCache
from hazard_risk.composite import compute_composite_index
from hazard_risk.config import HazardRiskConfig
from hazard_risk.fetchers import sort_events
from hazard_risk.ingestion import SEISMIC, ingest, ingest_all
from hazard_risk.models import (
    HAZARD_ORDER,
    Hazard,
    HazardAssessment,
    Location,
    PrecipitationHistory,
    RiskLevel,
    RiskScore,
    SeismicEvent,
    SeismicReport,
    StormTelemetry,
)
from hazard_risk.scoring import (
    classify_heatwave,
    score_cyclone,
    score_earthquake,
    score_flood,
    score_heatwave,
    score_wildfire,
)

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="seconds")


def score_observations(
    seismic: tuple[SeismicEvent, ...] | None,
    storm: StormTelemetry | None,
    precipitation: PrecipitationHistory | None,
    heatwave_level: RiskLevel | str | None = None,
    now_ms: int | None = None,
) -> dict[Hazard, RiskScore]:
    """Run every scorer over one cycle's observations.

    ``None`` marks a dataset with no usable data.
    """
    current = storm.current if storm is not None else None
    return {
        Hazard.FLOOD: score_flood(precipitation, current),
        Hazard.WILDFIRE: score_wildfire(current, precipitation),
        Hazard.EARTHQUAKE: score_earthquake(seismic, now_ms=now_ms),
        Hazard.CYCLONE: score_cyclone(
            storm.storms if storm is not None else None,
            storm.alerts if storm is not None else None,
        ),
        Hazard.HEATWAVE: score_heatwave(heatwave_level),
    }


def run_assessment(
    location: Location,
    config: HazardRiskConfig | None = None,
    cache: ObservationCache | None = None,
    session: Session | None = None,
    heatwave_level: RiskLevel | str | None = None,
) -> HazardAssessment:
    """Execute one full refresh cycle for *location*.

    Steps:
    1. Ingest seismic, storm and precipitation data concurrently
    2. Score each hazard (missing data scores LOW)
    3. Combine into the composite index
    4. Derive alerts
    """
    if config is None:
        config = HazardRiskConfig()
    if cache is None:
        cache = ObservationCache(ttl_seconds=config.cache_ttl_seconds)

    logger.info("Assessing hazards at (%.4f, %.4f)...", location.latitude, location.longitude)
    snapshot = ingest_all(location, cache, config=config, session=session)

    seismic = snapshot.seismic.data
    storm = snapshot.storm.data
    precipitation = snapshot.precipitation.data

    if heatwave_level is None and config.derive_heatwave and storm and storm.current is not None:
        heatwave_level = classify_heatwave(storm.current.temperature, storm.current.humidity)
        logger.debug("Derived heatwave level %s from current weather", heatwave_level)

    scores = score_observations(seismic, storm, precipitation, heatwave_level)
    index = compute_composite_index(scores)
    alerts = derive_alerts(scores[h] for h in HAZARD_ORDER)

    assessment = HazardAssessment(
        location=location,
        assessed_at=_now_iso(),
        scores={h.value: scores[h] for h in HAZARD_ORDER},
        index=index,
        alerts=tuple(alerts),
        data_status=snapshot.status,
        seismic_events=seismic or (),
        storm_telemetry=storm,
        precipitation=precipitation,
    )
    logger.info(
        "Composite index %d (%s), primary concern %s, %d alerts%s",
        index.score,
        index.level.label,
        index.primary_concern,
        len(alerts),
        " [degraded]" if assessment.degraded else "",
    )
    return assessment


def run_seismic_report(
    location: Location,
    config: HazardRiskConfig | None = None,
    cache: ObservationCache | None = None,
    session: Session | None = None,
    sort_by: str = "distance",
) -> SeismicReport:
    """Refresh and score seismic data only.

    *sort_by* orders the reported events (``distance``, ``time`` or
    ``magnitude``); scoring does not depend on it.
    """
    if config is None:
        config = HazardRiskConfig()
    if cache is None:
        cache = ObservationCache(ttl_seconds=config.cache_ttl_seconds)

    outcome = ingest(location, cache, config=config, session=session, datasets=(SEISMIC,))[SEISMIC]
    events = outcome.data
    return SeismicReport(
        location=location,
        assessed_at=_now_iso(),
        events=tuple(sort_events(events or (), by=sort_by)),
        score=score_earthquake(events),
        status=outcome.status,
    )
