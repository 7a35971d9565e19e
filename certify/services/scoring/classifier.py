"""Certification tier classification from the overall score."""

from __future__ import annotations

from certify.schemas.enums import CertificationLevel
from certify.services.scoring.scoring_constants import CERTIFIED_THRESHOLD, GOLD_THRESHOLD


def classify(overall_score: float) -> CertificationLevel:
    """Map overall score (0..100) to a tier; thresholds evaluated high to low."""
    if overall_score >= GOLD_THRESHOLD:
        return CertificationLevel.GOLD
    if overall_score >= CERTIFIED_THRESHOLD:
        return CertificationLevel.CERTIFIED
    return CertificationLevel.NOT_CERTIFIED
