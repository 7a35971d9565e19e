"""Score aggregation: indicators -> sub-pillar -> pillar -> overall.

Sub-pillar averages are on the 0..1 scale; pillar and overall scores are
percentages capped at 100. Values are returned unrounded so classification
sees the true mean; rounding happens only on output.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from certify.services.scoring.scoring_constants import (
    CAP_PERCENTAGE_MAX,
    PILLAR_IDS,
    SCORE_DECIMALS,
)


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _cap(percentage: float) -> float:
    return max(0.0, min(CAP_PERCENTAGE_MAX, percentage))


def round_score(percentage: float) -> float:
    """Display/storage rounding for pillar and overall percentages."""
    return round(_cap(percentage), SCORE_DECIMALS)


def aggregate_sub_pillar(indicator_scores: Iterable[float]) -> float:
    """Mean of normalized indicator scores (0 if empty)."""
    return min(1.0, _mean(list(indicator_scores)))


def aggregate_pillar(sub_pillar_scores: Iterable[float]) -> float:
    """Mean of sub-pillar averages as a percentage (0 if empty)."""
    return _cap(_mean(list(sub_pillar_scores)) * 100)


def aggregate_overall(pillar_scores: Mapping[int, float] | Iterable[float]) -> float:
    """Mean over all six pillars; a pillar absent from the input contributes 0.

    Accepts either a pillar_id -> score mapping or a sequence of pillar scores.
    """
    if isinstance(pillar_scores, Mapping):
        values = [float(pillar_scores.get(pid, 0.0)) for pid in PILLAR_IDS]
    else:
        values = [float(s) for s in pillar_scores]
        values += [0.0] * (len(PILLAR_IDS) - len(values))
    total = sum(_cap(v) for v in values)
    return _cap(total / max(len(values), len(PILLAR_IDS)))
