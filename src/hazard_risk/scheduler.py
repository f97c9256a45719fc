"""Periodic, cancellable refresh loop."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Run *task* every *interval_seconds* on a background scheduler.

    The job is registered with ``max_instances=1`` so a cycle never starts
    while the previous one is still running; missed runs are coalesced.
    ``stop()`` waits for an in-flight cycle before returning, so a later
    ``start()`` cannot run alongside it.
    """

    def __init__(
        self,
        task: Callable[[], object],
        interval_seconds: float,
        name: str = "hazard-refresh",
        run_immediately: bool = True,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._task = task
        self.interval_seconds = interval_seconds
        self.name = name
        self.run_immediately = run_immediately
        self.cycles = 0
        self._scheduler: BackgroundScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.running:
            raise RuntimeError(f"{self.name} is already running")

        job_options: dict[str, Any] = {}
        if self.run_immediately:
            job_options["next_run_time"] = datetime.now(timezone.utc)

        scheduler = BackgroundScheduler(timezone=timezone.utc)
        scheduler.add_job(
            self.run_once,
            IntervalTrigger(seconds=self.interval_seconds),
            id=self.name,
            name=self.name,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            **job_options,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.debug("%s started, every %ss", self.name, self.interval_seconds)

    def stop(self) -> None:
        """Cancel future cycles and wait for a running one to finish."""
        scheduler, self._scheduler = self._scheduler, None
        if scheduler is not None and scheduler.running:
            scheduler.shutdown(wait=True)
            logger.debug("%s stopped after %d cycles", self.name, self.cycles)

    def run_once(self) -> None:
        """Run one cycle, logging rather than propagating task failures."""
        try:
            self._task()
        except Exception:
            logger.exception("%s cycle failed", self.name)
        finally:
            self.cycles += 1

    def __enter__(self) -> RefreshScheduler:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
