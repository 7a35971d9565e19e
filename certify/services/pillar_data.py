"""Conversion between the ``pillar_<n>`` UI structure and flat indicator rows.

Inbound, a pillarData map is flattened into indicator submissions when the
client sends no flat list. Outbound, persisted rows are rebuilt into the
same shape, with completion and score taken from the scoring engine.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from certify.models import IndicatorResponse
from certify.schemas.submission import EvidencePayload, IndicatorSubmission
from certify.services.evidence import merge_evidence
from certify.services.scoring.engine import ScoreResult

logger = logging.getLogger(__name__)

_PILLAR_KEY = re.compile(r"^pillar_(\d+)$")


def pillar_key(pillar_id: int) -> str:
    return f"pillar_{pillar_id}"


def _parse_evidence(raw: Any, indicator_id: str) -> EvidencePayload | None:
    if not isinstance(raw, Mapping) or not raw:
        return None
    try:
        return EvidencePayload.model_validate(raw)
    except ValidationError:
        logger.warning("Ignoring malformed evidence for indicator %s", indicator_id)
        return None


def _max_score(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def flatten_pillar_data(pillar_data: Mapping[str, Any] | None) -> list[IndicatorSubmission]:
    """Flatten {pillar_<n>: {indicators: {...}, evidence: {...}}} into submissions.

    Indicator entries may be a bare value or a dict carrying ``value`` (and
    optionally ``evidence``, ``measurementUnit`` and ``maxScore``). Evidence found under the
    pillar-level ``evidence`` map is used when the entry has none.
    """
    submissions: list[IndicatorSubmission] = []
    for key, block in (pillar_data or {}).items():
        match = _PILLAR_KEY.match(str(key))
        if match is None or not isinstance(block, Mapping):
            continue
        pillar_id = int(match.group(1))
        indicators = block.get("indicators") or {}
        side_evidence = block.get("evidence") or {}
        if not isinstance(indicators, Mapping):
            continue
        for indicator_id, entry in indicators.items():
            unit = None
            max_score = None
            raw_evidence = None
            if isinstance(entry, Mapping):
                value = entry.get("value")
                unit = entry.get("measurementUnit")
                max_score = _max_score(entry.get("maxScore"))
                raw_evidence = entry.get("evidence")
            else:
                value = entry
            if not raw_evidence and isinstance(side_evidence, Mapping):
                raw_evidence = side_evidence.get(indicator_id)
            evidence = _parse_evidence(raw_evidence, indicator_id)
            submissions.append(
                IndicatorSubmission(
                    indicator_id=str(indicator_id),
                    pillar_id=pillar_id,
                    raw_value=value,
                    measurement_unit=unit,
                    max_score=max_score,
                    evidence=evidence,
                )
            )
    return submissions


def build_pillar_data(
    responses: Iterable[IndicatorResponse], result: ScoreResult
) -> dict[str, dict[str, Any]]:
    """Rebuild pillar_<n> blocks from persisted rows.

    Only pillars with at least one stored answer get a block. ``completion``
    and ``score`` come from ``result`` so they match the stored scores.
    """
    pillar_data: dict[str, dict[str, Any]] = {}
    for response in responses:
        key = pillar_key(response.pillar_id)
        block = pillar_data.setdefault(
            key,
            {"indicators": {}, "evidence": {}, "lastModified": None, "completion": 0.0, "score": 0.0},
        )
        evidence = merge_evidence(response.evidence)
        last_modified = response.updated_at.isoformat() if response.updated_at else None
        block["indicators"][response.indicator_id] = {
            "id": response.indicator_id,
            "value": response.raw_value,
            "measurementUnit": response.measurement_unit,
            "maxScore": response.max_score,
            "normalizedScore": response.normalized_score,
            "hasEvidence": response.has_evidence,
            "evidence": evidence,
            "lastModified": last_modified,
        }
        if evidence:
            block["evidence"][response.indicator_id] = evidence
        if last_modified and (block["lastModified"] is None or last_modified > block["lastModified"]):
            block["lastModified"] = last_modified

    for key, block in pillar_data.items():
        pillar_id = int(key.split("_", 1)[1])
        pillar_score = result.pillar_scores.get(pillar_id)
        if pillar_score is not None:
            block["completion"] = pillar_score.completion
            block["score"] = pillar_score.score
    return pillar_data
