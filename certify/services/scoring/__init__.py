"""Scoring engine: normalizer, aggregator, classifier, recommendations."""

from certify.services.scoring.aggregator import (
    aggregate_overall,
    aggregate_pillar,
    aggregate_sub_pillar,
    round_score,
)
from certify.services.scoring.classifier import classify
from certify.services.scoring.engine import (
    PillarScore,
    ScorableIndicator,
    ScoreResult,
    SubPillarScore,
    compute_scores,
)
from certify.services.scoring.normalizer import normalize, requires_evidence
from certify.services.scoring.recommendations import generate_recommendations

__all__ = [
    "PillarScore",
    "ScorableIndicator",
    "ScoreResult",
    "SubPillarScore",
    "aggregate_overall",
    "aggregate_pillar",
    "aggregate_sub_pillar",
    "classify",
    "compute_scores",
    "generate_recommendations",
    "normalize",
    "requires_evidence",
    "round_score",
]
