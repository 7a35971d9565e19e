"""Application API routes: create, read, reconcile, partial save, submit, validate, dashboard."""

from __future__ import annotations

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from certify.api.deps import get_current_user_id, get_db, get_indicator_catalog
from certify.catalog.loader import IndicatorCatalog
from certify.schemas.submission import (
    ApplicationUpdateRequest,
    CreateApplicationRequest,
    IndicatorSaveRequest,
)
from certify.services.application_validator import validate_application
from certify.services.dashboard import (
    build_application_view,
    build_dashboard,
    get_application_view,
    serialize_certification,
    serialize_scores,
)
from certify.services.errors import (
    ApplicationNotFoundError,
    ReconcileConflictError,
    ReconcileError,
    ReconcileTimeoutError,
)
from certify.services.reconciler import (
    ReconcileResult,
    create_application,
    reconcile,
    save_indicator,
    submit_application,
)

router = APIRouter()


def _raise_http(exc: ReconcileError) -> NoReturn:
    """Map service errors to HTTP status codes."""
    if isinstance(exc, ApplicationNotFoundError):
        raise HTTPException(status_code=404, detail="Application not found") from exc
    if isinstance(exc, ReconcileConflictError):
        raise HTTPException(
            status_code=409, detail="Conflicting save; nothing was changed"
        ) from exc
    if isinstance(exc, ReconcileTimeoutError):
        raise HTTPException(
            status_code=408, detail="Save timed out; nothing was changed. Retry the request."
        ) from exc
    raise exc


def _outcome_payload(outcome: ReconcileResult) -> dict:
    application = outcome.application
    return {
        "id": application.id,
        "status": application.status,
        "responsesSaved": outcome.responses_saved,
        "responsesDropped": outcome.responses_dropped,
        "scoresWritten": outcome.scores_written,
        "scores": serialize_scores(outcome.scores) if outcome.scores is not None else None,
        "certification": serialize_certification(outcome.certification),
    }


@router.post("", status_code=201)
def api_create_application(
    data: CreateApplicationRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    catalog: IndicatorCatalog = Depends(get_indicator_catalog),
) -> dict:
    """Create a draft application for the caller."""
    application = create_application(db, user_id, data.institution_data)
    return build_application_view(db, application, catalog)


@router.get("/{application_id}")
def api_get_application(
    application_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    catalog: IndicatorCatalog = Depends(get_indicator_catalog),
) -> dict:
    """Application with pillar data rebuilt from stored answers and evidence."""
    try:
        return get_application_view(db, application_id, user_id, catalog)
    except ReconcileError as exc:
        _raise_http(exc)


@router.put("/{application_id}")
def api_update_application(
    application_id: int,
    data: ApplicationUpdateRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    catalog: IndicatorCatalog = Depends(get_indicator_catalog),
) -> dict:
    """Replace the application's indicator set and optionally compute scores."""
    try:
        outcome = reconcile(db, application_id, user_id, data, catalog)
    except ReconcileError as exc:
        _raise_http(exc)
    return _outcome_payload(outcome)


@router.put("/{application_id}/indicators/{indicator_id}")
def api_save_indicator(
    application_id: int,
    indicator_id: str,
    data: IndicatorSaveRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    catalog: IndicatorCatalog = Depends(get_indicator_catalog),
) -> dict:
    """Save one indicator answer (and its evidence, when sent)."""
    try:
        row = save_indicator(db, application_id, user_id, indicator_id, data, catalog)
    except ReconcileError as exc:
        _raise_http(exc)
    if row is None:
        return {"indicatorId": indicator_id, "saved": False}
    return {
        "indicatorId": row.indicator_id,
        "pillarId": row.pillar_id,
        "rawValue": row.raw_value,
        "normalizedScore": row.normalized_score,
        "measurementUnit": row.measurement_unit,
        "maxScore": row.max_score,
        "hasEvidence": row.has_evidence,
        "saved": True,
    }


@router.post("/{application_id}/submit")
def api_submit_application(
    application_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    catalog: IndicatorCatalog = Depends(get_indicator_catalog),
) -> dict:
    """Submit the application and score its stored answers."""
    try:
        outcome = submit_application(db, application_id, user_id, catalog)
    except ReconcileError as exc:
        _raise_http(exc)
    return _outcome_payload(outcome)


@router.get("/{application_id}/validation")
def api_validate_application(
    application_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    catalog: IndicatorCatalog = Depends(get_indicator_catalog),
) -> dict:
    """Completeness report for the application."""
    try:
        return validate_application(db, application_id, user_id, catalog)
    except ReconcileError as exc:
        _raise_http(exc)


@router.get("/{application_id}/dashboard")
def api_application_dashboard(
    application_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    catalog: IndicatorCatalog = Depends(get_indicator_catalog),
) -> dict:
    """Scores, recommendations, history and certification for the application."""
    try:
        return build_dashboard(db, application_id, user_id, catalog)
    except ReconcileError as exc:
        _raise_http(exc)
