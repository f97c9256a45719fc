"""JSON exporter for hazard assessments."""

from __future__ import annotations

import json
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Any

from hazard_risk.fetchers.usgs import magnitude_class
from hazard_risk.geo import format_time_ago
from hazard_risk.models import HazardAssessment, SeismicEvent, SeismicReport, Storm


def _plain(items: list[tuple[str, Any]]) -> dict[str, Any]:
    return {key: value.value if isinstance(value, Enum) else value for key, value in items}


def event_to_dict(event: SeismicEvent, now_ms: int | None = None) -> dict[str, Any]:
    """Event fields plus magnitude class and a relative "time ago" label."""
    data = asdict(event, dict_factory=_plain)
    mag_class = magnitude_class(event.magnitude)
    data["magnitude_class"] = mag_class.level
    data["magnitude_description"] = mag_class.description
    data["time_ago"] = format_time_ago(event.time_ms, now_ms)
    return data


def storm_to_dict(storm: Storm) -> dict[str, Any]:
    """Storm fields plus the 16-point compass direction."""
    data = asdict(storm, dict_factory=_plain)
    data["direction"] = storm.direction
    return data


def assessment_to_dict(
    result: HazardAssessment | SeismicReport,
    now_ms: int | None = None,
) -> dict[str, Any]:
    """Convert an assessment into JSON-ready primitives."""
    data = asdict(result, dict_factory=_plain)
    if isinstance(result, HazardAssessment):
        data["degraded"] = result.degraded
        data["seismic_events"] = [event_to_dict(ev, now_ms) for ev in result.seismic_events]
        if result.storm_telemetry is not None:
            data["storm_telemetry"]["storms"] = [
                storm_to_dict(s) for s in result.storm_telemetry.storms
            ]
    else:
        data["events"] = [event_to_dict(ev, now_ms) for ev in result.events]
    return data


def export_json(
    result: HazardAssessment | SeismicReport,
    output_path: Path,
    indent: int = 2,
) -> Path:
    """Export an assessment to a JSON file."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(assessment_to_dict(result), f, indent=indent, ensure_ascii=False)
    return output_path
