"""Composite risk index: weighted combination of per-hazard scores."""

from __future__ import annotations

import math
from collections.abc import Mapping

from hazard_risk.models import HAZARD_ORDER, CompositeRiskIndex, Hazard, RiskScore
from hazard_risk.scoring import clamp_score, level_of

HAZARD_WEIGHTS: dict[Hazard, float] = {
    Hazard.FLOOD: 0.25,
    Hazard.WILDFIRE: 0.20,
    Hazard.EARTHQUAKE: 0.20,
    Hazard.CYCLONE: 0.25,
    Hazard.HEATWAVE: 0.10,
}

HIGH_RISK_THRESHOLD = 60
AMPLIFICATION_STEP = 0.1
NO_CONCERN = "None"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def amplification_factor(high_risk_count: int) -> float:
    """Boost applied when two or more hazards are independently HIGH or worse."""
    if high_risk_count > 1:
        return 1 + high_risk_count * AMPLIFICATION_STEP
    return 1.0


def compute_composite_index(
    scores: Mapping[Hazard, RiskScore | int | None],
) -> CompositeRiskIndex:
    """Combine per-hazard scores into a single 0-100 index.

    *scores* may hold RiskScore objects or bare integers; missing hazards
    count as 0. The primary concern is the first hazard, in
    ``HAZARD_ORDER``, holding the strictly greatest score.
    """
    breakdown: dict[Hazard, int] = {}
    for hazard in HAZARD_ORDER:
        value = scores.get(hazard)
        if isinstance(value, RiskScore):
            value = value.score
        breakdown[hazard] = clamp_score(value or 0)

    weighted = sum(breakdown[h] * HAZARD_WEIGHTS[h] for h in HAZARD_ORDER)
    high_risk_count = sum(1 for s in breakdown.values() if s >= HIGH_RISK_THRESHOLD)
    final = clamp_score(_round_half_up(weighted * amplification_factor(high_risk_count)))

    primary: Hazard | None = None
    best = 0
    for hazard in HAZARD_ORDER:
        if breakdown[hazard] > best:
            primary, best = hazard, breakdown[hazard]

    return CompositeRiskIndex(
        score=final,
        level=level_of(final),
        primary_concern=primary.value if primary is not None else NO_CONCERN,
        breakdown={h.value: s for h, s in breakdown.items()},
        weights={h.value: w for h, w in HAZARD_WEIGHTS.items()},
        high_risk_count=high_risk_count,
    )
