"""Indicator normalizer: raw answer + measurement unit -> score in [0, 1].

Lenient by policy: malformed or out-of-range input degrades the score and
never raises.
"""

from __future__ import annotations

import math
from typing import Any

from certify.catalog.units import MeasurementUnit, UnitKind, parse_unit
from certify.services.scoring.scoring_constants import (
    EVIDENCE_DEFAULT_THRESHOLD,
    EVIDENCE_PERCENTAGE_THRESHOLD,
    EVIDENCE_SCORE_FRACTION,
)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _to_float(value: Any) -> float:
    """Best-effort numeric coercion; anything unusable becomes 0."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _ratio(value: str) -> float:
    """"a:b" -> a / (a + b)."""
    left, _, right = value.partition(":")
    a, b = _to_float(left.strip()), _to_float(right.strip())
    if a + b <= 0:
        return 0.0
    return a / (a + b)


def coerce_raw_value(raw_value: Any, unit: MeasurementUnit) -> float | None:
    """Return the numeric value of a raw answer, or None when unanswered.

    None and blank strings are unanswered. 0 is an answer.
    """
    if raw_value is None:
        return None
    if isinstance(raw_value, str):
        stripped = raw_value.strip()
        if not stripped:
            return None
        if unit.kind is UnitKind.RATIO and ":" in stripped:
            return _ratio(stripped)
        return _to_float(stripped)
    return _to_float(raw_value)


def _exceeds_evidence_threshold(value: float, unit: MeasurementUnit) -> bool:
    if unit.kind is UnitKind.SCORE:
        return value > EVIDENCE_SCORE_FRACTION * unit.max_value
    if unit.kind is UnitKind.PERCENTAGE:
        return value > EVIDENCE_PERCENTAGE_THRESHOLD
    return value > EVIDENCE_DEFAULT_THRESHOLD


def _resolve_unit(unit: MeasurementUnit | str | None, max_score: float | None) -> MeasurementUnit:
    if isinstance(unit, MeasurementUnit):
        return unit
    return parse_unit(unit, max_score)


def requires_evidence(
    raw_value: Any, unit: MeasurementUnit | str | None, max_score: float | None = None
) -> bool:
    """Return True when an answer this high must be backed by evidence to count.

    Score units: above half the scale max. Percentage: above 50. Anything else:
    any value above 0. Unanswered values never require evidence.
    """
    parsed = _resolve_unit(unit, max_score)
    value = coerce_raw_value(raw_value, parsed)
    return value is not None and _exceeds_evidence_threshold(value, parsed)


def normalize(
    raw_value: Any,
    unit: MeasurementUnit | str | None,
    max_score: float | None = None,
    has_evidence: bool = False,
    evidence_required: bool = True,
) -> float:
    """Normalize one indicator answer to [0, 1].

    Args:
        raw_value: Number, numeric string, "a:b" ratio string, or None.
        unit: Parsed unit or a unit label such as "Score (1-5)".
        max_score: Overrides the scale max parsed from a Score label.
        has_evidence: Whether supporting evidence is attached.
        evidence_required: Catalog policy flag; False disables evidence gating.

    Returns:
        Score clamped to [0, 1]. Unanswered values and high values without
        required evidence score 0.
    """
    parsed = _resolve_unit(unit, max_score)
    value = coerce_raw_value(raw_value, parsed)
    if value is None:
        return 0.0
    if evidence_required and not has_evidence and _exceeds_evidence_threshold(value, parsed):
        return 0.0

    kind = parsed.kind
    if kind is UnitKind.BINARY:
        return _clamp(value)
    if kind is UnitKind.SCORE:
        span = parsed.max_value - parsed.min_value
        if span <= 0:
            return 0.0
        return _clamp((value - parsed.min_value) / span)
    if kind is UnitKind.PERCENTAGE:
        return _clamp(value / 100)
    if kind is UnitKind.COUNT:
        benchmark = parsed.benchmark or 0
        if benchmark <= 0:
            return 0.0
        return _clamp(value / benchmark)
    if kind is UnitKind.RATIO:
        return _clamp(value)
    return 0.0
