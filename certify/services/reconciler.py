"""Response reconciler: persist indicator answers and evidence, then score.

Every mutation of indicator responses, evidence, score audits and
certifications goes through this module, inside one all-or-nothing
transaction per call.

Single-writer assumption: two reconciles for the same application race on
delete-then-insert and the last writer wins entirely. Callers serialize
writes per application; nothing here merges concurrent batches.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from certify.catalog.loader import IndicatorCatalog
from certify.config import get_settings
from certify.models import Application, Certification, Evidence, IndicatorResponse
from certify.schemas.enums import ApplicationStatus
from certify.schemas.submission import (
    ApplicationUpdateRequest,
    IndicatorSaveRequest,
    IndicatorSubmission,
)
from certify.services.errors import (
    ApplicationNotFoundError,
    ReconcileConflictError,
    ReconcileError,
    ReconcileTimeoutError,
)
from certify.services.evidence import EvidenceItem, build_evidence_rows, tag_evidence
from certify.services.pillar_data import flatten_pillar_data
from certify.services.score_audit_writer import upsert_certification, write_score_audits
from certify.services.scoring.engine import (
    ScorableIndicator,
    ScoreResult,
    compute_scores,
)
from certify.services.scoring.scoring_constants import PILLAR_IDS

logger = logging.getLogger(__name__)

# PostgreSQL query_canceled (statement_timeout)
_SQLSTATE_QUERY_CANCELED = "57014"

# Admin outcomes that a new save sends back to DRAFT
_RESUBMISSION_STATUSES = frozenset(
    {ApplicationStatus.RESUBMISSION_REQUIRED.value, ApplicationStatus.REJECTED.value}
)


@dataclass
class ResolvedIndicator:
    """A submission that survived filtering, with its evidence already tagged."""

    indicator_id: str
    pillar_id: int
    raw_value: Any
    measurement_unit: str | None
    has_evidence: bool
    max_score: float | None = None
    evidence: list[EvidenceItem] = field(default_factory=list)

    def to_scorable(self) -> ScorableIndicator:
        return ScorableIndicator(
            indicator_id=self.indicator_id,
            pillar_id=self.pillar_id,
            raw_value=self.raw_value,
            measurement_unit=self.measurement_unit,
            has_evidence=self.has_evidence,
            max_score=self.max_score,
        )


@dataclass
class ReconcileResult:
    application: Application
    responses_saved: int = 0
    responses_dropped: int = 0
    scores: ScoreResult | None = None
    scores_written: bool = False
    certification: Certification | None = None


class _Deadline:
    """Wall-clock budget for one reconcile transaction."""

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        self._expires_at = time.monotonic() + seconds

    def check(self, step: str) -> None:
        if time.monotonic() >= self._expires_at:
            raise ReconcileTimeoutError(
                f"reconcile exceeded {self.seconds:g}s budget during {step}"
            )


def _is_statement_timeout(exc: OperationalError) -> bool:
    return getattr(exc.orig, "sqlstate", None) == _SQLSTATE_QUERY_CANCELED


@contextmanager
def reconcile_transaction(db: Session, timeout_seconds: float | None = None) -> Iterator[_Deadline]:
    """Run a block as one transaction with a timeout; commit on success, roll back on any error.

    On PostgreSQL the budget is also applied as a local statement_timeout so
    a single slow statement is cancelled server-side.

    Raises:
        ReconcileTimeoutError: Budget exceeded (retriable).
        ReconcileConflictError: Constraint violation.
    """
    if timeout_seconds is None:
        timeout_seconds = get_settings().reconcile_timeout_seconds
    deadline = _Deadline(timeout_seconds)
    try:
        if db.get_bind().dialect.name == "postgresql":
            db.execute(
                text(f"SET LOCAL statement_timeout = {max(1, int(timeout_seconds * 1000))}")
            )
        yield deadline
        deadline.check("commit")
        db.commit()
    except ReconcileError as exc:
        db.rollback()
        logger.warning("Reconcile rolled back: %s", exc)
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Reconcile conflict, rolled back: %s", exc.orig)
        raise ReconcileConflictError(f"constraint violation: {exc.orig}") from exc
    except OperationalError as exc:
        db.rollback()
        if _is_statement_timeout(exc):
            logger.warning("Reconcile statement timeout, rolled back: %s", exc.orig)
            raise ReconcileTimeoutError(
                f"reconcile exceeded {timeout_seconds:g}s statement timeout"
            ) from exc
        raise
    except Exception:
        db.rollback()
        raise


def get_owned_application(db: Session, application_id: int, user_id: str) -> Application:
    """Return the caller's application or raise ApplicationNotFoundError."""
    application = (
        db.query(Application)
        .filter(Application.id == application_id, Application.user_id == user_id)
        .first()
    )
    if application is None:
        raise ApplicationNotFoundError(f"application {application_id} not found")
    return application


def create_application(
    db: Session, user_id: str, institution_data: dict[str, Any] | None = None
) -> Application:
    """Create a DRAFT application for the caller."""
    application = Application(
        user_id=user_id,
        status=ApplicationStatus.DRAFT.value,
        institution_data=institution_data,
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    logger.info("Application created: id=%s user_id=%s", application.id, user_id)
    return application


def _has_value(raw_value: Any) -> bool:
    if raw_value is None:
        return False
    return not (isinstance(raw_value, str) and not raw_value.strip())


def _resolve_pillar_id(
    indicator_id: str, pillar_id: int | str | None, catalog: IndicatorCatalog
) -> int | None:
    """Catalog pillar for known ids; otherwise the submitted one, else the id's leading segment."""
    known = catalog.get(indicator_id)
    if known is not None:
        return known.pillar_id
    if isinstance(pillar_id, int) and not isinstance(pillar_id, bool):
        resolved: int | None = pillar_id
    elif isinstance(pillar_id, str) and pillar_id.strip().isdigit():
        resolved = int(pillar_id.strip())
    else:
        resolved = catalog.pillar_for(indicator_id)
    return resolved if resolved in PILLAR_IDS else None


def resolve_submissions(
    submissions: Iterable[IndicatorSubmission], catalog: IndicatorCatalog
) -> tuple[list[ResolvedIndicator], int]:
    """Drop unusable entries and tag evidence.

    Dropped: no indicator id, no resolvable pillar, neither a value nor
    evidence, or a repeat of an id already seen in the batch (first wins).

    Returns:
        (resolved indicators, number dropped)
    """
    resolved: list[ResolvedIndicator] = []
    seen: set[str] = set()
    dropped = 0
    for submission in submissions:
        indicator_id = (submission.indicator_id or "").strip()
        if not indicator_id or indicator_id == "undefined":
            logger.debug("Dropping indicator entry without id")
            dropped += 1
            continue
        pillar_id = _resolve_pillar_id(indicator_id, submission.pillar_id, catalog)
        if pillar_id is None:
            logger.debug("Dropping indicator %s: no resolvable pillar", indicator_id)
            dropped += 1
            continue
        items = tag_evidence(submission.evidence)
        if not _has_value(submission.raw_value) and not items:
            logger.debug("Dropping indicator %s: no value or evidence", indicator_id)
            dropped += 1
            continue
        if indicator_id in seen:
            logger.debug("Dropping repeated indicator %s", indicator_id)
            dropped += 1
            continue
        seen.add(indicator_id)
        resolved.append(
            ResolvedIndicator(
                indicator_id=indicator_id,
                pillar_id=pillar_id,
                raw_value=submission.raw_value,
                measurement_unit=submission.measurement_unit,
                has_evidence=submission.has_evidence or bool(items),
                max_score=submission.max_score,
                evidence=items,
            )
        )
    return resolved, dropped


def scorables_from_rows(responses: Iterable[IndicatorResponse]) -> list[ScorableIndicator]:
    return [
        ScorableIndicator(
            indicator_id=r.indicator_id,
            pillar_id=r.pillar_id,
            raw_value=r.raw_value,
            measurement_unit=r.measurement_unit,
            has_evidence=r.has_evidence,
            max_score=r.max_score,
        )
        for r in responses
    ]


def _load_responses(db: Session, application_id: int) -> list[IndicatorResponse]:
    return (
        db.query(IndicatorResponse)
        .filter(IndicatorResponse.application_id == application_id)
        .order_by(IndicatorResponse.indicator_id)
        .all()
    )


def _replace_evidence(
    db: Session, response: IndicatorResponse, items: list[EvidenceItem]
) -> None:
    db.query(Evidence).filter(Evidence.indicator_response_id == response.id).delete(
        synchronize_session="fetch"
    )
    db.add_all(build_evidence_rows(items, response.id, response.application_id))
    db.flush()


def _replace_responses(
    db: Session,
    application: Application,
    resolved: list[ResolvedIndicator],
    result: ScoreResult,
    deadline: _Deadline,
) -> list[IndicatorResponse]:
    """Delete the application's full indicator set, insert the new one, then its evidence."""
    db.query(Evidence).filter(Evidence.application_id == application.id).delete(
        synchronize_session="fetch"
    )
    db.query(IndicatorResponse).filter(
        IndicatorResponse.application_id == application.id
    ).delete(synchronize_session="fetch")
    db.flush()
    deadline.check("delete")

    rows = [
        IndicatorResponse(
            application_id=application.id,
            indicator_id=ind.indicator_id,
            pillar_id=ind.pillar_id,
            raw_value=ind.raw_value,
            normalized_score=result.indicator_scores.get(ind.indicator_id, 0.0) * 100,
            measurement_unit=result.indicator_units.get(ind.indicator_id)
            or ind.measurement_unit
            or "",
            has_evidence=ind.has_evidence,
            max_score=ind.max_score,
        )
        for ind in resolved
    ]
    db.add_all(rows)
    db.flush()
    deadline.check("insert")

    for row, ind in zip(rows, resolved):
        if not ind.evidence:
            continue
        _replace_evidence(db, row, ind.evidence)
        deadline.check(f"evidence {ind.indicator_id}")
    db.expire(application, ["indicator_responses"])
    return rows


def _apply_status(application: Application, requested: ApplicationStatus | None) -> None:
    previous = application.status
    if requested == ApplicationStatus.SUBMITTED:
        application.status = ApplicationStatus.SUBMITTED.value
        application.submitted_at = datetime.now(timezone.utc)
    elif requested == ApplicationStatus.DRAFT or previous in _RESUBMISSION_STATUSES:
        application.status = ApplicationStatus.DRAFT.value
    if application.status != previous:
        logger.info(
            "Application status changed: id=%s %s -> %s",
            application.id,
            previous,
            application.status,
        )


def _record_scores(
    db: Session, application: Application, user_id: str, result: ScoreResult
) -> tuple[bool, Certification | None]:
    """Write audit rows and upsert the certification; skipped when nothing is scorable."""
    if not result.is_scorable:
        logger.warning(
            "Skipping score audit for application_id=%s: no scorable indicators",
            application.id,
        )
        return False, None
    calculated_at = datetime.now(timezone.utc)
    write_score_audits(db, application.id, user_id, result, calculated_at=calculated_at)
    certification = upsert_certification(db, application.id, result, issued_at=calculated_at)
    return True, certification


def reconcile(
    db: Session,
    application_id: int,
    user_id: str,
    update: ApplicationUpdateRequest,
    catalog: IndicatorCatalog,
    timeout_seconds: float | None = None,
) -> ReconcileResult:
    """Replace an application's indicator/evidence state and optionally score it.

    The indicator set comes from ``indicatorResponses``, or from a flattened
    ``pillarData`` when no flat list is sent. When neither is sent the stored
    indicator set is left as is. Scores are computed when the status becomes
    SUBMITTED or ``computeScores`` is set.

    Raises:
        ApplicationNotFoundError: Unknown application or not the caller's.
        ReconcileConflictError: Constraint violation; nothing was saved.
        ReconcileTimeoutError: Budget exceeded; nothing was saved.
    """
    with reconcile_transaction(db, timeout_seconds) as deadline:
        application = get_owned_application(db, application_id, user_id)
        outcome = ReconcileResult(application=application)

        submissions = update.indicator_responses
        if submissions is None and update.pillar_data is not None:
            submissions = flatten_pillar_data(update.pillar_data)

        result: ScoreResult | None = None
        if submissions is not None:
            resolved, dropped = resolve_submissions(submissions, catalog)
            if dropped:
                logger.info(
                    "Dropped %d unusable indicator entries for application_id=%s",
                    dropped,
                    application_id,
                )
            result = compute_scores([ind.to_scorable() for ind in resolved], catalog)
            rows = _replace_responses(db, application, resolved, result, deadline)
            outcome.responses_saved = len(rows)
            outcome.responses_dropped = dropped

        if update.institution_data is not None:
            application.institution_data = update.institution_data
        if update.pillar_data is not None:
            application.pillar_data = update.pillar_data
        _apply_status(application, update.status)
        application.updated_at = datetime.now(timezone.utc)

        if update.status == ApplicationStatus.SUBMITTED or update.compute_scores:
            if result is None:
                result = compute_scores(
                    scorables_from_rows(_load_responses(db, application_id)), catalog
                )
            outcome.scores_written, outcome.certification = _record_scores(
                db, application, user_id, result
            )
            deadline.check("scoring")
        outcome.scores = result

    logger.info(
        "Reconciled application_id=%s saved=%d dropped=%d scored=%s",
        application_id,
        outcome.responses_saved,
        outcome.responses_dropped,
        outcome.scores_written,
    )
    return outcome


def save_indicator(
    db: Session,
    application_id: int,
    user_id: str,
    indicator_id: str,
    request: IndicatorSaveRequest,
    catalog: IndicatorCatalog,
    timeout_seconds: float | None = None,
) -> IndicatorResponse | None:
    """Upsert one indicator answer without touching the rest of the set.

    Evidence is replaced only when the request carries a non-blank evidence
    payload. An answer with neither a value nor evidence removes the row.

    Returns:
        The saved row, or None when the indicator was cleared or unusable.
    """
    submission = IndicatorSubmission(
        indicator_id=indicator_id,
        pillar_id=request.pillar_id,
        raw_value=request.raw_value,
        measurement_unit=request.measurement_unit,
        max_score=request.max_score,
        has_evidence=request.has_evidence,
        evidence=request.evidence,
    )
    with reconcile_transaction(db, timeout_seconds) as deadline:
        application = get_owned_application(db, application_id, user_id)
        existing = (
            db.query(IndicatorResponse)
            .filter(
                IndicatorResponse.application_id == application_id,
                IndicatorResponse.indicator_id == indicator_id,
            )
            .first()
        )
        _apply_status(application, None)
        application.updated_at = datetime.now(timezone.utc)

        resolved, _ = resolve_submissions([submission], catalog)
        # A blank evidence payload leaves stored evidence alone, like an absent one.
        no_new_evidence = not tag_evidence(request.evidence)
        kept_evidence = bool(existing and existing.evidence) and no_new_evidence
        if not resolved and not kept_evidence:
            if existing is not None:
                db.delete(existing)
                logger.info(
                    "Cleared indicator %s for application_id=%s", indicator_id, application_id
                )
            return None
        if not resolved:
            # Value cleared but earlier evidence remains; keep the row as evidence-only.
            ind = None
            pillar_id = existing.pillar_id
        else:
            ind = resolved[0]
            pillar_id = ind.pillar_id

        has_evidence = (ind.has_evidence if ind else False) or kept_evidence
        scorable = ScorableIndicator(
            indicator_id=indicator_id,
            pillar_id=pillar_id,
            raw_value=ind.raw_value if ind else None,
            measurement_unit=(ind.measurement_unit if ind else None)
            or (existing.measurement_unit if existing else None),
            has_evidence=has_evidence,
            max_score=ind.max_score if ind else existing.max_score,
        )
        single = compute_scores([scorable], catalog)

        row = existing or IndicatorResponse(application_id=application_id, indicator_id=indicator_id)
        row.pillar_id = pillar_id
        row.raw_value = scorable.raw_value
        row.normalized_score = single.indicator_scores.get(indicator_id, 0.0) * 100
        row.measurement_unit = single.indicator_units.get(indicator_id) or ""
        row.max_score = scorable.max_score
        row.has_evidence = has_evidence
        if existing is None:
            db.add(row)
        db.flush()
        deadline.check("upsert")

        if ind is not None and ind.evidence:
            _replace_evidence(db, row, ind.evidence)
            deadline.check("evidence")

    db.refresh(row)
    return row


def submit_application(
    db: Session,
    application_id: int,
    user_id: str,
    catalog: IndicatorCatalog,
    timeout_seconds: float | None = None,
) -> ReconcileResult:
    """Mark the application SUBMITTED and score its persisted indicator set."""
    with reconcile_transaction(db, timeout_seconds) as deadline:
        application = get_owned_application(db, application_id, user_id)
        _apply_status(application, ApplicationStatus.SUBMITTED)
        application.updated_at = datetime.now(timezone.utc)
        responses = _load_responses(db, application_id)
        result = compute_scores(scorables_from_rows(responses), catalog)
        written, certification = _record_scores(db, application, user_id, result)
        deadline.check("scoring")
        outcome = ReconcileResult(
            application=application,
            responses_saved=len(responses),
            scores=result,
            scores_written=written,
            certification=certification,
        )
    logger.info(
        "Application submitted: id=%s overall=%.2f level=%s",
        application_id,
        result.overall_score,
        result.certification_level.value,
    )
    return outcome


def rescore_application(
    db: Session,
    application_id: int,
    user_id: str,
    catalog: IndicatorCatalog,
    timeout_seconds: float | None = None,
) -> ReconcileResult:
    """Recompute and record scores from the persisted indicator set.

    Unlike a reconcile, neither the indicator set nor the application status
    is touched, so review states such as REJECTED survive a rescore.
    """
    with reconcile_transaction(db, timeout_seconds) as deadline:
        application = get_owned_application(db, application_id, user_id)
        responses = _load_responses(db, application_id)
        result = compute_scores(scorables_from_rows(responses), catalog)
        written, certification = _record_scores(db, application, user_id, result)
        deadline.check("scoring")
        outcome = ReconcileResult(
            application=application,
            responses_saved=len(responses),
            scores=result,
            scores_written=written,
            certification=certification,
        )
    logger.info(
        "Application rescored: id=%s overall=%.2f level=%s written=%s",
        application_id,
        result.overall_score,
        result.certification_level.value,
        written,
    )
    return outcome
