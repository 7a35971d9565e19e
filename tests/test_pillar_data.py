"""Tests for pillar_<n> flattening."""

from __future__ import annotations

from certify.services.pillar_data import flatten_pillar_data, pillar_key


def test_pillar_key() -> None:
    assert pillar_key(3) == "pillar_3"


class TestFlatten:
    def test_none_and_empty(self) -> None:
        assert flatten_pillar_data(None) == []
        assert flatten_pillar_data({}) == []

    def test_bare_values_and_dict_entries(self) -> None:
        subs = flatten_pillar_data(
            {
                "pillar_1": {"indicators": {"1.1.1": 2}},
                "pillar_2": {
                    "indicators": {
                        "2.1.1": {
                            "value": 90,
                            "measurementUnit": "Percentage (%)",
                            "evidence": {"text": {"description": "Budget report"}},
                        }
                    }
                },
            }
        )
        by_id = {s.indicator_id: s for s in subs}
        assert by_id["1.1.1"].pillar_id == 1
        assert by_id["1.1.1"].raw_value == 2
        assert by_id["2.1.1"].pillar_id == 2
        assert by_id["2.1.1"].raw_value == 90
        assert by_id["2.1.1"].measurement_unit == "Percentage (%)"
        assert by_id["2.1.1"].evidence.text.description == "Budget report"

    def test_pillar_level_evidence_map(self) -> None:
        subs = flatten_pillar_data(
            {
                "pillar_3": {
                    "indicators": {"3.1.1": 5},
                    "evidence": {"3.1.1": {"link": {"url": "https://example.com"}}},
                }
            }
        )
        assert subs[0].evidence.link.url == "https://example.com"

    def test_unrelated_keys_are_skipped(self) -> None:
        subs = flatten_pillar_data(
            {"lastSaved": "2025-01-01", "pillar_x": {}, "pillar_1": "oops", "pillar_2": {"indicators": []}}
        )
        assert subs == []

    def test_malformed_evidence_is_ignored(self) -> None:
        subs = flatten_pillar_data(
            {"pillar_1": {"indicators": {"1.1.1": {"value": 1, "evidence": {"file": {"fileSize": "big"}}}}}}
        )
        assert subs[0].raw_value == 1
        assert subs[0].evidence is None

    def test_max_score_is_carried(self) -> None:
        subs = flatten_pillar_data(
            {
                "pillar_1": {
                    "indicators": {
                        "1.1.a": {"value": 2, "measurementUnit": "Score", "maxScore": "2"},
                        "1.1.b": {"value": 1, "measurementUnit": "Score", "maxScore": "n/a"},
                    }
                }
            }
        )
        by_id = {s.indicator_id: s for s in subs}
        assert by_id["1.1.a"].max_score == 2.0
        assert by_id["1.1.b"].max_score is None
