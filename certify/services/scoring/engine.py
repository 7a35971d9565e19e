"""Scoring engine: indicator answers -> pillar scores, tier and recommendations.

Single entry point used by every write, read and preview path so stored and
displayed scores never diverge.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from certify.catalog.loader import IndicatorCatalog
from certify.catalog.units import MeasurementUnit, parse_unit
from certify.schemas.enums import CertificationLevel
from certify.services.scoring.aggregator import (
    aggregate_overall,
    aggregate_pillar,
    aggregate_sub_pillar,
    round_score,
)
from certify.services.scoring.classifier import classify
from certify.services.scoring.normalizer import coerce_raw_value, normalize
from certify.services.scoring.recommendations import generate_recommendations
from certify.services.scoring.scoring_constants import (
    CAP_PERCENTAGE_MAX,
    PILLAR_IDS,
    SCORE_DECIMALS,
)

logger = logging.getLogger(__name__)


@dataclass
class ScorableIndicator:
    """One indicator answer as seen by the engine."""

    indicator_id: str
    pillar_id: int
    raw_value: Any
    measurement_unit: str | None = None
    has_evidence: bool = False
    max_score: float | None = None  # upper bound for off-catalog "Score" units


@dataclass
class SubPillarScore:
    sub_pillar_id: str
    average: float  # 0..1
    indicator_count: int


@dataclass
class PillarScore:
    pillar_id: int
    name: str
    score: float  # 0..100
    completion: float  # percent of catalog indicators answered
    answered: int
    expected: int
    sub_pillars: list[SubPillarScore] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pillar_id": self.pillar_id,
            "name": self.name,
            "score": self.score,
            "completion": self.completion,
            "answered": self.answered,
            "expected": self.expected,
            "sub_pillars": {
                sp.sub_pillar_id: round(sp.average * 100, SCORE_DECIMALS) for sp in self.sub_pillars
            },
        }


@dataclass
class ScoreResult:
    overall_score: float
    certification_level: CertificationLevel
    pillar_scores: dict[int, PillarScore]
    recommendations: list[str]
    indicator_scores: dict[str, float]  # indicator_id -> normalized 0..1
    indicator_units: dict[str, str]  # indicator_id -> resolved unit label
    is_scorable: bool

    def to_score_data(self) -> dict[str, Any]:
        """JSON-safe snapshot stored on every score audit row."""
        return {
            "overall_score": self.overall_score,
            "certification_level": self.certification_level.value,
            "pillar_scores": [ps.to_dict() for _, ps in sorted(self.pillar_scores.items())],
            "recommendations": list(self.recommendations),
            "indicator_scores": dict(self.indicator_scores),
        }


def resolve_unit(
    indicator_id: str,
    submitted_label: str | None,
    catalog: IndicatorCatalog,
    max_score: float | None = None,
) -> tuple[MeasurementUnit, bool]:
    """Return (unit, evidence_required).

    Catalog units win over submitted labels; a submitted max_score only bounds
    the unit of an off-catalog indicator.
    """
    definition = catalog.get(indicator_id)
    if definition is not None:
        return definition.unit, definition.evidence_required
    return parse_unit(submitted_label, max_score), True


def _dedupe(indicators: Iterable[ScorableIndicator]) -> list[ScorableIndicator]:
    seen: set[str] = set()
    unique = []
    for ind in indicators:
        if ind.indicator_id in seen:
            continue
        seen.add(ind.indicator_id)
        unique.append(ind)
    return unique


def compute_scores(
    indicators: Iterable[ScorableIndicator], catalog: IndicatorCatalog
) -> ScoreResult:
    """Score a set of indicator answers.

    Only answered indicators feed the sub-pillar means; every one of the six
    pillars is reported, and unanswered pillars score 0 and still count in
    the overall mean. The first occurrence of a repeated indicator id wins.
    """
    answers = _dedupe(indicators)

    indicator_scores: dict[str, float] = {}
    indicator_units: dict[str, str] = {}
    # pillar_id -> sub_pillar_id -> normalized scores
    grouped: dict[int, dict[str, list[float]]] = {pid: {} for pid in PILLAR_IDS}
    answered: dict[int, int] = {pid: 0 for pid in PILLAR_IDS}

    for ind in answers:
        unit, evidence_required = resolve_unit(
            ind.indicator_id, ind.measurement_unit, catalog, ind.max_score
        )
        indicator_units[ind.indicator_id] = unit.label
        normalized = normalize(
            ind.raw_value,
            unit,
            has_evidence=ind.has_evidence,
            evidence_required=evidence_required,
        )
        indicator_scores[ind.indicator_id] = normalized
        if coerce_raw_value(ind.raw_value, unit) is None:
            continue
        if ind.pillar_id not in grouped:
            logger.warning(
                "Indicator %s has out-of-range pillar_id=%s; not scored",
                ind.indicator_id,
                ind.pillar_id,
            )
            continue
        sub_pillar_id = catalog.sub_pillar_for(ind.indicator_id)
        grouped[ind.pillar_id].setdefault(sub_pillar_id, []).append(normalized)
        answered[ind.pillar_id] += 1

    pillar_scores: dict[int, PillarScore] = {}
    raw_pillar_scores: dict[int, float] = {}
    for pid in PILLAR_IDS:
        sub_pillars = [
            SubPillarScore(
                sub_pillar_id=sp_id,
                average=aggregate_sub_pillar(scores),
                indicator_count=len(scores),
            )
            for sp_id, scores in sorted(grouped[pid].items())
        ]
        expected = catalog.expected_count(pid)
        completion = (
            min(CAP_PERCENTAGE_MAX, answered[pid] / expected * 100) if expected else 0.0
        )
        raw_pillar_scores[pid] = aggregate_pillar(sp.average for sp in sub_pillars)
        pillar_scores[pid] = PillarScore(
            pillar_id=pid,
            name=catalog.pillar_name(pid),
            score=round_score(raw_pillar_scores[pid]),
            completion=round(completion, SCORE_DECIMALS),
            answered=answered[pid],
            expected=expected,
            sub_pillars=sub_pillars,
        )

    # Tier and recommendations use unrounded values; only the reported scores are rounded.
    overall = aggregate_overall(raw_pillar_scores)
    is_scorable = sum(answered.values()) > 0 and math.isfinite(overall)
    level = classify(overall)
    recommendations = generate_recommendations(
        raw_pillar_scores,
        overall,
        completion={pid: ps.completion for pid, ps in pillar_scores.items()},
    )
    return ScoreResult(
        overall_score=round_score(overall),
        certification_level=level,
        pillar_scores=pillar_scores,
        recommendations=recommendations,
        indicator_scores=indicator_scores,
        indicator_units=indicator_units,
        is_scorable=is_scorable,
    )
