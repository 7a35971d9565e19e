"""Persist score computations: append-only ScoreAudit rows and the Certification upsert.

Writers add and flush only; the reconcile transaction owns the commit.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy.orm import Session

from certify.config import get_settings
from certify.models import Certification, ScoreAudit
from certify.schemas.enums import CertificationLevel
from certify.services.scoring.engine import ScoreResult

logger = logging.getLogger(__name__)


def write_score_audits(
    db: Session,
    application_id: int,
    user_id: str,
    result: ScoreResult,
    calculated_at: datetime | None = None,
) -> list[ScoreAudit]:
    """Append one ScoreAudit per pillar for a single computation event.

    All rows share overall_score, certification_level, calculated_at and the
    full score_data snapshot.
    """
    calculated_at = calculated_at or datetime.now(timezone.utc)
    score_data = result.to_score_data()
    rows = [
        ScoreAudit(
            application_id=application_id,
            user_id=user_id,
            pillar_id=pillar.pillar_id,
            pillar_score=pillar.score,
            overall_score=result.overall_score,
            certification_level=result.certification_level.value,
            calculated_at=calculated_at,
            score_data=score_data,
        )
        for pillar in result.pillar_scores.values()
    ]
    db.add_all(rows)
    db.flush()
    logger.info(
        "Score audit written: application_id=%s overall=%.2f level=%s pillars=%d",
        application_id,
        result.overall_score,
        result.certification_level.value,
        len(rows),
    )
    return rows


def upsert_certification(
    db: Session,
    application_id: int,
    result: ScoreResult,
    issued_at: datetime | None = None,
) -> Certification | None:
    """Create or overwrite the application's certification.

    NOT_CERTIFIED results leave any existing certification untouched and
    return None.
    """
    if result.certification_level == CertificationLevel.NOT_CERTIFIED:
        return None
    issued_at = issued_at or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(days=get_settings().certification_validity_days)
    pillar_scores = {str(pid): ps.score for pid, ps in result.pillar_scores.items()}

    certification = (
        db.query(Certification).filter(Certification.application_id == application_id).first()
    )
    if certification is None:
        certification = Certification(application_id=application_id)
        db.add(certification)
    certification.certification_level = result.certification_level.value
    certification.overall_score = result.overall_score
    certification.pillar_scores = pillar_scores
    certification.issued_at = issued_at
    certification.expires_at = expires_at
    certification.is_active = True
    db.flush()
    logger.info(
        "Certification upserted: application_id=%s level=%s expires_at=%s",
        application_id,
        certification.certification_level,
        expires_at.isoformat(),
    )
    return certification


def get_score_history(db: Session, application_id: int) -> list[dict[str, Any]]:
    """Score audit history grouped by computation event, latest first."""
    rows = (
        db.query(ScoreAudit)
        .filter(ScoreAudit.application_id == application_id)
        .order_by(ScoreAudit.calculated_at.desc(), ScoreAudit.id.asc())
        .all()
    )
    events: list[dict[str, Any]] = []
    for row in rows:
        if not events or events[-1]["calculated_at"] != row.calculated_at:
            events.append(
                {
                    "calculated_at": row.calculated_at,
                    "user_id": row.user_id,
                    "overall_score": row.overall_score,
                    "certification_level": row.certification_level,
                    "pillar_scores": {},
                    "score_data": row.score_data,
                }
            )
        events[-1]["pillar_scores"][row.pillar_id] = row.pillar_score
    return events


def get_latest_scores(db: Session, application_id: int) -> dict[str, Any] | None:
    """Most recent computation event for an application, or None."""
    history = get_score_history(db, application_id)
    return history[0] if history else None
