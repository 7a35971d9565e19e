"""SQLAlchemy models."""

from certify.models.application import Application
from certify.models.certification import Certification
from certify.models.evidence import Evidence
from certify.models.indicator_response import IndicatorResponse
from certify.models.score_audit import ScoreAudit

__all__ = [
    "Application",
    "Certification",
    "Evidence",
    "IndicatorResponse",
    "ScoreAudit",
]
