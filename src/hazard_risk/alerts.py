"""Alert derivation from per-hazard scores."""

from __future__ import annotations

from collections.abc import Iterable

from hazard_risk.models import Alert, RiskScore

ALERT_THRESHOLD = 35


def derive_alerts(scores: Iterable[RiskScore]) -> list[Alert]:
    """Project scores at or above MODERATE into alerts, most severe first.

    Ties keep the input order.
    """
    flagged = [s for s in scores if s.score >= ALERT_THRESHOLD]
    flagged.sort(key=lambda s: s.level.rank)
    return [
        Alert(type=s.hazard.value, severity=s.level.label, message=s.reasoning)
        for s in flagged
    ]
