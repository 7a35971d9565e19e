"""Tests for recommendation generation."""

from __future__ import annotations

import pytest

from certify.services.scoring.recommendations import generate_recommendations
from certify.services.scoring.scoring_constants import (
    OVERALL_EXCELLENCE_MESSAGE,
    OVERALL_FOUNDATIONAL_MESSAGE,
    OVERALL_GOLD_PUSH_MESSAGE,
    PILLAR_IMPROVEMENT_MESSAGES,
)

ALL_HIGH = {pid: 95.0 for pid in range(1, 7)}
ALL_COMPLETE = {pid: 100.0 for pid in range(1, 7)}


class TestOverallMessage:
    @pytest.mark.parametrize(
        "overall,expected",
        [
            (0, OVERALL_FOUNDATIONAL_MESSAGE),
            (59.99, OVERALL_FOUNDATIONAL_MESSAGE),
            (60, OVERALL_GOLD_PUSH_MESSAGE),
            (79.99, OVERALL_GOLD_PUSH_MESSAGE),
            (80, OVERALL_EXCELLENCE_MESSAGE),
        ],
    )
    def test_first_message_is_overall_tier(self, overall: float, expected: str) -> None:
        assert generate_recommendations(ALL_HIGH, overall, ALL_COMPLETE)[0] == expected

    def test_high_and_complete_is_single_message(self) -> None:
        assert generate_recommendations(ALL_HIGH, 95, ALL_COMPLETE) == [OVERALL_EXCELLENCE_MESSAGE]


class TestPillarMessages:
    def test_underperforming_pillars_in_ascending_order(self) -> None:
        scores = {**ALL_HIGH, 5: 10.0, 2: 59.9}
        result = generate_recommendations(scores, 70, ALL_COMPLETE)
        assert result == [
            OVERALL_GOLD_PUSH_MESSAGE,
            PILLAR_IMPROVEMENT_MESSAGES[2],
            PILLAR_IMPROVEMENT_MESSAGES[5],
        ]

    def test_completion_message_precedes_pillar_template(self) -> None:
        scores = {**ALL_HIGH, 3: 0.0}
        completion = {**ALL_COMPLETE, 3: 25.0}
        result = generate_recommendations(scores, 80, completion)
        assert result == [
            OVERALL_EXCELLENCE_MESSAGE,
            "Complete more indicators in Pillar 3 to improve your assessment coverage.",
            PILLAR_IMPROVEMENT_MESSAGES[3],
        ]

    def test_missing_pillars_get_both_messages(self) -> None:
        result = generate_recommendations({1: 100.0}, 16.67, {1: 100.0})
        assert result[0] == OVERALL_FOUNDATIONAL_MESSAGE
        assert len(result) == 1 + 5 * 2
        assert PILLAR_IMPROVEMENT_MESSAGES[1] not in result

    def test_no_completion_map_skips_coverage_messages(self) -> None:
        result = generate_recommendations({1: 100.0}, 16.67)
        assert not any(m.startswith("Complete more") for m in result)
        assert len(result) == 1 + 5

    def test_never_empty(self) -> None:
        assert generate_recommendations({}, 100, ALL_COMPLETE)
