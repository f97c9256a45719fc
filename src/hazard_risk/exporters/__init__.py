"""Exporters for hazard assessments."""

from hazard_risk.exporters.json_export import (
    assessment_to_dict,
    event_to_dict,
    export_json,
    storm_to_dict,
)

__all__ = ["assessment_to_dict", "event_to_dict", "export_json", "storm_to_dict"]
