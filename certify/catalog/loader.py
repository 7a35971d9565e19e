"""Indicator catalog loader.

The catalog is the authoritative, read-only registry of indicators: which
pillar and sub-pillar each belongs to, its measurement unit and whether high
answers must carry evidence. It is loaded once from YAML and frozen.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from certify.catalog.units import MeasurementUnit, parse_unit
from certify.catalog.validator import validate_catalog

_CATALOG_PATH = Path(__file__).parent / "indicators.yaml"


@dataclass(frozen=True)
class IndicatorDefinition:
    id: str
    pillar_id: int
    sub_pillar_id: str
    unit: MeasurementUnit
    evidence_required: bool = True


@dataclass(frozen=True)
class SubPillarDefinition:
    id: str
    name: str
    indicator_ids: tuple[str, ...]


@dataclass(frozen=True)
class PillarDefinition:
    id: int
    name: str
    sub_pillars: tuple[SubPillarDefinition, ...]

    @property
    def indicator_ids(self) -> tuple[str, ...]:
        return tuple(i for sp in self.sub_pillars for i in sp.indicator_ids)


@dataclass(frozen=True, eq=False)
class IndicatorCatalog:
    """Frozen indicator registry. Build via :func:`load_catalog`."""

    version: str
    pillars: Mapping[int, PillarDefinition]
    indicators: Mapping[str, IndicatorDefinition]

    @property
    def pillar_ids(self) -> tuple[int, ...]:
        return tuple(sorted(self.pillars))

    def get(self, indicator_id: str) -> IndicatorDefinition | None:
        return self.indicators.get(indicator_id)

    def pillar_name(self, pillar_id: int) -> str:
        pillar = self.pillars.get(pillar_id)
        return pillar.name if pillar else f"Pillar {pillar_id}"

    def expected_count(self, pillar_id: int) -> int:
        """Number of catalog indicators in a pillar (completion denominator)."""
        pillar = self.pillars.get(pillar_id)
        return len(pillar.indicator_ids) if pillar else 0

    def sub_pillar_for(self, indicator_id: str) -> str:
        """Sub-pillar id for an indicator.

        Off-catalog ids fall back to the first two dotted segments ("1.1.a" -> "1.1").
        """
        definition = self.indicators.get(indicator_id)
        if definition is not None:
            return definition.sub_pillar_id
        return ".".join(indicator_id.split(".")[:2])

    def pillar_for(self, indicator_id: str) -> int | None:
        """Pillar id for an indicator, or None when it cannot be derived."""
        definition = self.indicators.get(indicator_id)
        if definition is not None:
            return definition.pillar_id
        head = indicator_id.split(".", 1)[0]
        return int(head) if head.isdigit() else None


def build_catalog(data: dict[str, Any]) -> IndicatorCatalog:
    """Validate raw catalog content and freeze it into an :class:`IndicatorCatalog`.

    Raises:
        CatalogValidationError: If the content is structurally invalid.
    """
    validate_catalog(data)
    pillars: dict[int, PillarDefinition] = {}
    indicators: dict[str, IndicatorDefinition] = {}
    for raw_pillar in data["pillars"]:
        pillar_id = raw_pillar["id"]
        sub_pillars = []
        for raw_sub in raw_pillar["sub_pillars"]:
            ids = []
            for raw_ind in raw_sub["indicators"]:
                indicators[raw_ind["id"]] = IndicatorDefinition(
                    id=raw_ind["id"],
                    pillar_id=pillar_id,
                    sub_pillar_id=raw_sub["id"],
                    unit=parse_unit(raw_ind["unit"], raw_ind.get("max_score")),
                    evidence_required=raw_ind.get("evidence_required", True),
                )
                ids.append(raw_ind["id"])
            sub_pillars.append(
                SubPillarDefinition(
                    id=raw_sub["id"], name=raw_sub.get("name") or raw_sub["id"], indicator_ids=tuple(ids)
                )
            )
        pillars[pillar_id] = PillarDefinition(
            id=pillar_id, name=raw_pillar["name"], sub_pillars=tuple(sub_pillars)
        )
    return IndicatorCatalog(
        version=str(data.get("version") or "unversioned"),
        pillars=MappingProxyType(pillars),
        indicators=MappingProxyType(indicators),
    )


def load_catalog(path: Path | None = None) -> IndicatorCatalog:
    """Load and validate the indicator catalog from YAML.

    Raises:
        FileNotFoundError: If the catalog file is missing.
        ValueError: If the YAML is malformed.
        CatalogValidationError: If the catalog is structurally invalid.
    """
    catalog_path = path or _CATALOG_PATH
    try:
        with catalog_path.open() as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Indicator catalog YAML is malformed: {exc}") from exc
    return build_catalog(data)


@lru_cache(maxsize=1)
def get_catalog() -> IndicatorCatalog:
    """Return the bundled indicator catalog (cached after first call)."""
    return load_catalog()
