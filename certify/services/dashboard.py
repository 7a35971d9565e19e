"""Read-side views: reconstructed application and dashboard.

Scores shown here are recomputed from persisted rows with the same engine
the write path uses, so display and stored results agree.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from certify.catalog.loader import IndicatorCatalog
from certify.models import Application, Certification, IndicatorResponse
from certify.services.evidence import merge_evidence
from certify.services.pillar_data import build_pillar_data
from certify.services.reconciler import get_owned_application, scorables_from_rows
from certify.services.score_audit_writer import get_score_history
from certify.services.scoring.engine import ScoreResult, compute_scores
from certify.services.scoring.scoring_constants import PILLAR_IDS


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _responses(db: Session, application_id: int) -> list[IndicatorResponse]:
    return (
        db.query(IndicatorResponse)
        .filter(IndicatorResponse.application_id == application_id)
        .order_by(IndicatorResponse.pillar_id, IndicatorResponse.indicator_id)
        .all()
    )


def serialize_certification(certification: Certification | None) -> dict[str, Any] | None:
    if certification is None:
        return None
    return {
        "certificationLevel": certification.certification_level,
        "overallScore": certification.overall_score,
        "pillarScores": certification.pillar_scores,
        "issuedAt": _iso(certification.issued_at),
        "expiresAt": _iso(certification.expires_at),
        "isActive": certification.is_active,
    }


def serialize_scores(result: ScoreResult) -> dict[str, Any]:
    return {
        "overallScore": result.overall_score,
        "certificationLevel": result.certification_level.value,
        "pillarScores": [result.pillar_scores[pid].score for pid in PILLAR_IDS],
        "pillars": [result.pillar_scores[pid].to_dict() for pid in PILLAR_IDS],
        "recommendations": result.recommendations,
        "isScorable": result.is_scorable,
    }


def _history(db: Session, application_id: int) -> list[dict[str, Any]]:
    """One entry per computation event, latest first."""
    return [
        {
            "calculatedAt": _iso(event["calculated_at"]),
            "userId": event["user_id"],
            "overallScore": event["overall_score"],
            "certificationLevel": event["certification_level"],
            "pillarScores": [event["pillar_scores"].get(pid, 0.0) for pid in PILLAR_IDS],
        }
        for event in get_score_history(db, application_id)
    ]


def build_application_view(
    db: Session, application: Application, catalog: IndicatorCatalog
) -> dict[str, Any]:
    """Application with its pillar_<n> structure rebuilt from persisted rows."""
    responses = _responses(db, application.id)
    result = compute_scores(scorables_from_rows(responses), catalog)
    history = _history(db, application.id)
    return {
        "id": application.id,
        "status": application.status,
        "institutionData": application.institution_data,
        "pillarData": build_pillar_data(responses, result),
        "scores": history[0] if history else None,
        "submittedAt": _iso(application.submitted_at),
        "lastSaved": _iso(application.updated_at),
        "certification": serialize_certification(application.certification),
    }


def get_application_view(
    db: Session, application_id: int, user_id: str, catalog: IndicatorCatalog
) -> dict[str, Any]:
    """Raises ApplicationNotFoundError for unknown or foreign applications."""
    application = get_owned_application(db, application_id, user_id)
    return build_application_view(db, application, catalog)


def build_dashboard(
    db: Session, application_id: int, user_id: str, catalog: IndicatorCatalog
) -> dict[str, Any]:
    """Dashboard payload: current scores, recommendations, indicators, history, certification."""
    application = get_owned_application(db, application_id, user_id)
    responses = _responses(db, application.id)
    result = compute_scores(scorables_from_rows(responses), catalog)
    history = _history(db, application.id)

    indicators = [
        {
            "id": r.indicator_id,
            "pillarId": r.pillar_id,
            "rawValue": r.raw_value,
            "normalizedScore": r.normalized_score,
            "measurementUnit": r.measurement_unit,
            "maxScore": r.max_score,
            "hasEvidence": r.has_evidence,
            "evidence": merge_evidence(r.evidence),
        }
        for r in responses
    ]
    scores = serialize_scores(result)
    scores["lastCalculated"] = history[0]["calculatedAt"] if history else _iso(application.updated_at)

    return {
        "application": {
            "id": application.id,
            "status": application.status,
            "submittedAt": _iso(application.submitted_at),
            "updatedAt": _iso(application.updated_at),
        },
        "institutionData": application.institution_data,
        "pillarData": build_pillar_data(responses, result),
        "scores": scores,
        "recommendations": result.recommendations,
        "indicators": indicators,
        "history": history,
        "certification": serialize_certification(application.certification),
    }
