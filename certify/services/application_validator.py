"""Completeness validation for an application before submission."""

from __future__ import annotations

import re
from typing import Any

from sqlalchemy.orm import Session

from certify.catalog.loader import IndicatorCatalog
from certify.models import IndicatorResponse
from certify.services.reconciler import get_owned_application
from certify.services.scoring.engine import resolve_unit
from certify.services.scoring.normalizer import coerce_raw_value, requires_evidence
from certify.services.scoring.scoring_constants import PILLAR_IDS, SCORE_DECIMALS

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# (key, label) pairs required on institutionData
INSTITUTION_REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "Institution Name"),
    ("industry", "Industry"),
    ("organizationSize", "Organization Size"),
    ("country", "Country"),
    ("contactEmail", "Contact Email"),
)


def validate_institution_data(institution_data: dict[str, Any] | None) -> list[str]:
    """Return labels of missing or invalid institution fields."""
    data = institution_data or {}
    missing = []
    for key, label in INSTITUTION_REQUIRED_FIELDS:
        value = data.get(key)
        text = value.strip() if isinstance(value, str) else ""
        if key == "name":
            ok = len(text) >= 2
        elif key == "contactEmail":
            ok = bool(_EMAIL_PATTERN.match(text))
        else:
            ok = bool(text)
        if not ok:
            missing.append(label)
    return missing


def _check_response(response: IndicatorResponse, catalog: IndicatorCatalog) -> str | None:
    """Return the problem with one stored answer, or None when it is complete."""
    unit, evidence_required = resolve_unit(
        response.indicator_id, response.measurement_unit, catalog, response.max_score
    )
    if coerce_raw_value(response.raw_value, unit) is None:
        return f"Indicator {response.indicator_id} - No value provided"
    if (
        evidence_required
        and requires_evidence(response.raw_value, unit)
        and not response.has_evidence
    ):
        return f"Indicator {response.indicator_id} - Evidence required"
    return None


def validate_application(
    db: Session, application_id: int, user_id: str, catalog: IndicatorCatalog
) -> dict[str, Any]:
    """Completeness report: institution fields, per-pillar answers and evidence.

    Raises:
        ApplicationNotFoundError: Unknown application or not the caller's.
    """
    application = get_owned_application(db, application_id, user_id)
    responses = (
        db.query(IndicatorResponse)
        .filter(IndicatorResponse.application_id == application_id)
        .order_by(IndicatorResponse.indicator_id)
        .all()
    )

    missing_fields = validate_institution_data(application.institution_data)
    missing_items = [f"Institution information is incomplete: {f}" for f in missing_fields]

    pillars = []
    total_expected = 0
    total_complete = 0
    for pid in PILLAR_IDS:
        in_pillar = [r for r in responses if r.pillar_id == pid]
        pillar_missing: list[str] = []
        if not in_pillar:
            pillar_missing.append(f"No indicators found for Pillar {pid}")
        complete = 0
        for response in in_pillar:
            problem = _check_response(response, catalog)
            if problem is None:
                if catalog.get(response.indicator_id) is not None:
                    complete += 1
            else:
                pillar_missing.append(problem)
        expected = catalog.expected_count(pid)
        total_expected += expected
        total_complete += complete
        pillars.append(
            {
                "pillarId": pid,
                "name": catalog.pillar_name(pid),
                "expected": expected,
                "present": len(in_pillar),
                "complete": complete,
                "completion": round(complete / expected * 100, SCORE_DECIMALS) if expected else 0.0,
                "missingItems": pillar_missing,
            }
        )
        missing_items.extend(pillar_missing)

    return {
        "applicationId": application_id,
        "isValid": not missing_items,
        "completion": (
            round(total_complete / total_expected * 100, SCORE_DECIMALS) if total_expected else 0.0
        ),
        "institution": {"isValid": not missing_fields, "missingFields": missing_fields},
        "pillars": pillars,
        "missingItems": missing_items,
    }
