"""Tests for the indicator catalog: bundled content, unit parsing and validation."""

from __future__ import annotations

import copy
from pathlib import Path

import pytest

from certify.catalog.loader import build_catalog, get_catalog, load_catalog
from certify.catalog.units import UnitKind, parse_unit
from certify.catalog.validator import CatalogValidationError, validate_catalog


def _minimal_catalog() -> dict:
    return {
        "version": "test",
        "pillars": [
            {
                "id": pid,
                "name": f"Pillar {pid}",
                "sub_pillars": [
                    {
                        "id": f"{pid}.1",
                        "name": "Only",
                        "indicators": [{"id": f"{pid}.1.1", "unit": "Percentage (%)"}],
                    }
                ],
            }
            for pid in range(1, 7)
        ],
    }


class TestBundledCatalog:
    def test_indicator_count(self, catalog) -> None:
        assert len(catalog.indicators) == 73

    @pytest.mark.parametrize(
        "pillar_id,expected",
        [(1, 16), (2, 12), (3, 16), (4, 11), (5, 9), (6, 9)],
    )
    def test_expected_count_per_pillar(self, catalog, pillar_id: int, expected: int) -> None:
        assert catalog.expected_count(pillar_id) == expected

    def test_pillar_ids_and_names(self, catalog) -> None:
        assert catalog.pillar_ids == (1, 2, 3, 4, 5, 6)
        assert catalog.pillar_name(1) == "Strategic Foundation & Leadership"
        assert catalog.pillar_name(42) == "Pillar 42"
        assert catalog.expected_count(42) == 0

    @pytest.mark.parametrize(
        "indicator_id,kind,max_value",
        [
            ("1.1.1", UnitKind.SCORE, 2),
            ("1.2.1", UnitKind.BINARY, 1),
            ("1.2.4", UnitKind.SCORE, 5),
            ("1.3.1", UnitKind.SCORE, 3),
            ("2.1.1", UnitKind.PERCENTAGE, 100),
        ],
    )
    def test_units(self, catalog, indicator_id: str, kind: UnitKind, max_value: float) -> None:
        unit = catalog.get(indicator_id).unit
        assert unit.kind is kind
        assert unit.max_value == max_value

    @pytest.mark.parametrize(
        "indicator_id,benchmark",
        [("2.2.3", 40), ("3.2.1", 200), ("3.3.2", 5), ("3.3.3", 5)],
    )
    def test_count_benchmarks(self, catalog, indicator_id: str, benchmark: float) -> None:
        unit = catalog.get(indicator_id).unit
        assert unit.kind is UnitKind.COUNT
        assert unit.benchmark == benchmark

    def test_score_one_to_five_has_lower_bound(self, catalog) -> None:
        assert catalog.get("1.2.4").unit.min_value == 1

    def test_ratio_indicator_skips_evidence_gate(self, catalog) -> None:
        definition = catalog.get("4.1.2")
        assert definition.unit.kind is UnitKind.RATIO
        assert definition.evidence_required is False
        assert catalog.get("1.1.1").evidence_required is True

    def test_sub_pillar_lookup(self, catalog) -> None:
        assert catalog.sub_pillar_for("1.2.4") == "1.2"
        assert catalog.sub_pillar_for("1.1.a") == "1.1"

    def test_pillar_lookup(self, catalog) -> None:
        assert catalog.pillar_for("3.2.1") == 3
        assert catalog.pillar_for("5.9.9") == 5
        assert catalog.pillar_for("x.1") is None

    def test_catalog_is_read_only(self, catalog) -> None:
        with pytest.raises(TypeError):
            catalog.indicators["9.9.9"] = catalog.get("1.1.1")
        with pytest.raises(AttributeError):
            catalog.version = "other"

    def test_get_catalog_is_cached(self) -> None:
        assert get_catalog() is get_catalog()


class TestParseUnit:
    @pytest.mark.parametrize(
        "label,kind",
        [
            ("Binary (0-1)", UnitKind.BINARY),
            ("Score (0-3)", UnitKind.SCORE),
            ("Percentage (%)", UnitKind.PERCENTAGE),
            ("%", UnitKind.PERCENTAGE),
            ("Number (ideas per quarter)", UnitKind.COUNT),
            ("Hours per employee", UnitKind.COUNT),
            ("Ratio", UnitKind.RATIO),
            ("", UnitKind.UNKNOWN),
            (None, UnitKind.UNKNOWN),
            ("Stars", UnitKind.UNKNOWN),
        ],
    )
    def test_kind(self, label, kind: UnitKind) -> None:
        assert parse_unit(label).kind is kind

    def test_score_without_bounds_defaults_to_five(self) -> None:
        unit = parse_unit("Score")
        assert (unit.min_value, unit.max_value) == (0, 5)

    def test_unknown_count_category_uses_default_benchmark(self) -> None:
        assert parse_unit("Number (widgets)").benchmark == 100


class TestValidation:
    def test_minimal_catalog_is_valid(self) -> None:
        catalog = build_catalog(_minimal_catalog())
        assert len(catalog.indicators) == 6
        assert catalog.version == "test"

    def test_missing_pillar(self) -> None:
        data = _minimal_catalog()
        data["pillars"].pop()
        with pytest.raises(CatalogValidationError, match="pillars 1-6"):
            validate_catalog(data)

    def test_pillar_out_of_range(self) -> None:
        data = _minimal_catalog()
        data["pillars"][0]["id"] = 7
        with pytest.raises(CatalogValidationError, match="one of 1-6"):
            validate_catalog(data)

    def test_duplicate_indicator(self) -> None:
        data = _minimal_catalog()
        sub = data["pillars"][0]["sub_pillars"][0]
        sub["indicators"].append(copy.deepcopy(sub["indicators"][0]))
        with pytest.raises(CatalogValidationError, match="duplicate"):
            validate_catalog(data)

    def test_indicator_outside_its_sub_pillar(self) -> None:
        data = _minimal_catalog()
        data["pillars"][0]["sub_pillars"][0]["indicators"][0]["id"] = "2.1.1"
        with pytest.raises(CatalogValidationError, match="not under sub-pillar"):
            validate_catalog(data)

    def test_missing_unit(self) -> None:
        data = _minimal_catalog()
        data["pillars"][0]["sub_pillars"][0]["indicators"][0]["unit"] = " "
        with pytest.raises(CatalogValidationError, match="unit label"):
            validate_catalog(data)

    @pytest.mark.parametrize("max_score", [0, -1, "5", True])
    def test_bad_max_score(self, max_score) -> None:
        data = _minimal_catalog()
        data["pillars"][0]["sub_pillars"][0]["indicators"][0]["max_score"] = max_score
        with pytest.raises(CatalogValidationError, match="max_score"):
            validate_catalog(data)

    def test_bad_evidence_flag(self) -> None:
        data = _minimal_catalog()
        data["pillars"][0]["sub_pillars"][0]["indicators"][0]["evidence_required"] = "no"
        with pytest.raises(CatalogValidationError, match="evidence_required"):
            validate_catalog(data)

    def test_empty_sub_pillars(self) -> None:
        data = _minimal_catalog()
        data["pillars"][2]["sub_pillars"] = []
        with pytest.raises(CatalogValidationError, match="sub_pillars"):
            validate_catalog(data)

    def test_validation_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            validate_catalog({})


class TestLoadCatalog:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_catalog(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("pillars: [\n  - id: 1\n    name: {unclosed\n")
        with pytest.raises(ValueError, match="malformed"):
            load_catalog(path)

    def test_empty_file_fails_validation(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(CatalogValidationError):
            load_catalog(path)
