"""Indicator catalog: pillars, sub-pillars, indicators and their measurement units."""

from __future__ import annotations

from certify.catalog.loader import (
    IndicatorCatalog,
    IndicatorDefinition,
    PillarDefinition,
    SubPillarDefinition,
    build_catalog,
    get_catalog,
    load_catalog,
)
from certify.catalog.units import MeasurementUnit, UnitKind, parse_unit
from certify.catalog.validator import CatalogValidationError

__all__ = [
    "CatalogValidationError",
    "IndicatorCatalog",
    "IndicatorDefinition",
    "MeasurementUnit",
    "PillarDefinition",
    "SubPillarDefinition",
    "UnitKind",
    "build_catalog",
    "get_catalog",
    "load_catalog",
    "parse_unit",
]
