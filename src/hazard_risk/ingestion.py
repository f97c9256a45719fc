"""Concurrent, cache-backed ingestion of the three hazard datasets."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from functools import partial

from requests import Session

from hazard_risk.cache import ObservationCache, Outcome, cache_key
from hazard_risk.config import HazardRiskConfig
from hazard_risk.fetchers import (
    fetch_precipitation_history,
    fetch_seismic_events,
    fetch_storm_telemetry,
)
from hazard_risk.http import create_session
from hazard_risk.models import Location, PrecipitationHistory, SeismicEvent, StormTelemetry

logger = logging.getLogger(__name__)

SEISMIC = "seismic"
STORM = "storm"
PRECIPITATION = "precipitation"

# Seconds on top of the per-request timeout before a fetch is abandoned
_DEADLINE_SLACK = 5.0


@dataclass(frozen=True)
class IngestionSnapshot:
    """Outcome of one refresh cycle for each dataset."""

    seismic: Outcome[tuple[SeismicEvent, ...]]
    storm: Outcome[StormTelemetry]
    precipitation: Outcome[PrecipitationHistory]

    @property
    def status(self) -> dict[str, str]:
        return {
            SEISMIC: self.seismic.status,
            STORM: self.storm.status,
            PRECIPITATION: self.precipitation.status,
        }


def _loaders(
    location: Location,
    config: HazardRiskConfig,
    session: Session,
) -> dict[str, Callable[[], object]]:
    def seismic() -> tuple[SeismicEvent, ...]:
        return tuple(
            fetch_seismic_events(
                location,
                radius_km=config.seismic_radius_km,
                min_magnitude=config.min_magnitude,
                window_days=config.seismic_window_days,
                timeout=config.request_timeout,
                session=session,
            )
        )

    return {
        SEISMIC: seismic,
        STORM: partial(
            fetch_storm_telemetry,
            location,
            forecast_days=config.forecast_days,
            timeout=config.request_timeout,
            session=session,
        ),
        PRECIPITATION: partial(
            fetch_precipitation_history,
            location,
            days=config.precipitation_days,
            timeout=config.request_timeout,
            session=session,
        ),
    }


def ingest(
    location: Location,
    cache: ObservationCache,
    config: HazardRiskConfig | None = None,
    session: Session | None = None,
    datasets: tuple[str, ...] = (SEISMIC, STORM, PRECIPITATION),
) -> dict[str, Outcome]:
    """Fetch *datasets* concurrently with settle-all semantics.

    Each dataset resolves independently to Fresh, Stale or Unavailable;
    one failing never affects the others. Fetches still running after the
    deadline are abandoned and treated as transport failures.
    """
    if config is None:
        config = HazardRiskConfig()
    if session is None:
        session = create_session()

    loaders = _loaders(location, config, session)
    deadline = config.request_timeout + _DEADLINE_SLACK
    outcomes: dict[str, Outcome] = {}

    executor = ThreadPoolExecutor(max_workers=len(datasets), thread_name_prefix="ingest")
    try:
        futures: dict[str, Future] = {
            name: executor.submit(cache.fetch, cache_key(name, location), loaders[name])
            for name in datasets
        }
        wait(futures.values(), timeout=deadline)

        for name, future in futures.items():
            key = cache_key(name, location)
            if not future.done():
                logger.warning("Fetch for %s exceeded %.0fs deadline", name, deadline)
                future.cancel()
                outcomes[name] = cache.fallback(key, reason="deadline exceeded")
                continue
            try:
                outcomes[name] = future.result()
            except Exception as exc:
                logger.warning("Unexpected failure fetching %s", name, exc_info=True)
                outcomes[name] = cache.fallback(key, reason=repr(exc))
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    logger.info(
        "Ingestion for (%.2f, %.2f): %s",
        location.latitude,
        location.longitude,
        ", ".join(f"{name}={outcome.status}" for name, outcome in outcomes.items()),
    )
    return outcomes


def ingest_all(
    location: Location,
    cache: ObservationCache,
    config: HazardRiskConfig | None = None,
    session: Session | None = None,
) -> IngestionSnapshot:
    """Refresh all three datasets for *location*."""
    outcomes = ingest(location, cache, config=config, session=session)
    return IngestionSnapshot(
        seismic=outcomes[SEISMIC],
        storm=outcomes[STORM],
        precipitation=outcomes[PRECIPITATION],
    )
