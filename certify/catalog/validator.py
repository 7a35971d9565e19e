"""Indicator catalog schema validation.

Validates that indicators.yaml has the required structure:
- pillars: list of exactly six pillars with ids 1..6
- each pillar: sub_pillars list; each sub-pillar id is prefixed by its pillar id
- each indicator: unique id prefixed by its sub-pillar id, non-empty unit label,
  optional positive max_score and boolean evidence_required
"""

from __future__ import annotations

from typing import Any

PILLAR_IDS = (1, 2, 3, 4, 5, 6)


class CatalogValidationError(ValueError):
    """Raised when indicator catalog validation fails.

    Subclasses ValueError so startup can catch it alongside FileNotFoundError.
    """


def _validate_indicator(indicator: Any, sub_pillar_id: str, seen: set[str]) -> None:
    if not isinstance(indicator, dict):
        raise CatalogValidationError(
            f"catalog sub-pillar {sub_pillar_id} indicators must be dicts, got {indicator!r}"
        )
    indicator_id = indicator.get("id")
    if not isinstance(indicator_id, str) or not indicator_id.strip():
        raise CatalogValidationError(
            f"catalog sub-pillar {sub_pillar_id} has indicator without string id"
        )
    if not indicator_id.startswith(f"{sub_pillar_id}."):
        raise CatalogValidationError(
            f"catalog indicator '{indicator_id}' is not under sub-pillar '{sub_pillar_id}'"
        )
    if indicator_id in seen:
        raise CatalogValidationError(f"catalog contains duplicate indicator id: '{indicator_id}'")
    seen.add(indicator_id)

    unit = indicator.get("unit")
    if not isinstance(unit, str) or not unit.strip():
        raise CatalogValidationError(f"catalog indicator '{indicator_id}' must have a unit label")

    max_score = indicator.get("max_score")
    if max_score is not None:
        if isinstance(max_score, bool) or not isinstance(max_score, (int, float)) or max_score <= 0:
            raise CatalogValidationError(
                f"catalog indicator '{indicator_id}' max_score must be a positive number"
            )

    evidence_required = indicator.get("evidence_required", True)
    if not isinstance(evidence_required, bool):
        raise CatalogValidationError(
            f"catalog indicator '{indicator_id}' evidence_required must be a boolean"
        )


def validate_catalog(catalog: dict[str, Any]) -> None:
    """Validate indicator catalog structure.

    Args:
        catalog: Loaded indicators.yaml content.

    Raises:
        CatalogValidationError: When structure or id nesting fails.
    """
    if not isinstance(catalog, dict):
        raise CatalogValidationError("indicator catalog must be a dict")

    pillars = catalog.get("pillars")
    if not isinstance(pillars, list) or not pillars:
        raise CatalogValidationError("indicator catalog must have a non-empty 'pillars' list")

    pillar_ids = []
    seen_indicators: set[str] = set()
    for pillar in pillars:
        if not isinstance(pillar, dict):
            raise CatalogValidationError(f"catalog pillars must be dicts, got {pillar!r}")
        pillar_id = pillar.get("id")
        if pillar_id not in PILLAR_IDS or isinstance(pillar_id, bool):
            raise CatalogValidationError(f"catalog pillar id must be one of 1-6, got {pillar_id!r}")
        pillar_ids.append(pillar_id)
        if not isinstance(pillar.get("name"), str) or not pillar["name"].strip():
            raise CatalogValidationError(f"catalog pillar {pillar_id} must have a name")

        sub_pillars = pillar.get("sub_pillars")
        if not isinstance(sub_pillars, list) or not sub_pillars:
            raise CatalogValidationError(
                f"catalog pillar {pillar_id} must have a non-empty 'sub_pillars' list"
            )
        for sub_pillar in sub_pillars:
            if not isinstance(sub_pillar, dict):
                raise CatalogValidationError(
                    f"catalog pillar {pillar_id} sub_pillars must be dicts"
                )
            sub_pillar_id = sub_pillar.get("id")
            if not isinstance(sub_pillar_id, str) or not sub_pillar_id.startswith(f"{pillar_id}."):
                raise CatalogValidationError(
                    f"catalog sub-pillar {sub_pillar_id!r} is not under pillar {pillar_id}"
                )
            indicators = sub_pillar.get("indicators")
            if not isinstance(indicators, list) or not indicators:
                raise CatalogValidationError(
                    f"catalog sub-pillar {sub_pillar_id} must have a non-empty 'indicators' list"
                )
            for indicator in indicators:
                _validate_indicator(indicator, sub_pillar_id, seen_indicators)

    if sorted(pillar_ids) != list(PILLAR_IDS):
        raise CatalogValidationError(
            f"indicator catalog must define pillars 1-6 exactly once, got {sorted(pillar_ids)}"
        )
