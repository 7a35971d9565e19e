"""Stateless scoring preview."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from certify.api.deps import get_current_user_id, get_indicator_catalog
from certify.catalog.loader import IndicatorCatalog
from certify.schemas.submission import PreviewRequest
from certify.services.dashboard import serialize_scores
from certify.services.pillar_data import flatten_pillar_data
from certify.services.reconciler import resolve_submissions
from certify.services.scoring.engine import compute_scores

router = APIRouter()


@router.post("/preview")
def api_preview_scores(
    data: PreviewRequest,
    _user_id: str = Depends(get_current_user_id),
    catalog: IndicatorCatalog = Depends(get_indicator_catalog),
) -> dict:
    """Score submitted answers without persisting anything."""
    submissions = data.indicator_responses
    if submissions is None:
        submissions = flatten_pillar_data(data.pillar_data)
    resolved, dropped = resolve_submissions(submissions, catalog)
    result = compute_scores([ind.to_scorable() for ind in resolved], catalog)
    payload = serialize_scores(result)
    payload["indicatorScores"] = result.indicator_scores
    payload["responsesDropped"] = dropped
    return payload
