"""Improvement guidance derived from pillar and overall scores."""

from __future__ import annotations

from collections.abc import Mapping

from certify.services.scoring.scoring_constants import (
    COMPLETION_MESSAGE_TEMPLATE,
    OVERALL_EXCELLENCE_MESSAGE,
    OVERALL_FOUNDATIONAL_MESSAGE,
    OVERALL_GOLD_PUSH_MESSAGE,
    PILLAR_COMPLETION_THRESHOLD,
    PILLAR_IDS,
    PILLAR_IMPROVEMENT_MESSAGES,
    PILLAR_IMPROVEMENT_THRESHOLD,
    RECOMMENDATION_EXCELLENCE_THRESHOLD,
    RECOMMENDATION_GOLD_PUSH_THRESHOLD,
)


def overall_message(overall_score: float) -> str:
    if overall_score >= RECOMMENDATION_EXCELLENCE_THRESHOLD:
        return OVERALL_EXCELLENCE_MESSAGE
    if overall_score >= RECOMMENDATION_GOLD_PUSH_THRESHOLD:
        return OVERALL_GOLD_PUSH_MESSAGE
    return OVERALL_FOUNDATIONAL_MESSAGE


def generate_recommendations(
    pillar_scores: Mapping[int, float],
    overall_score: float,
    completion: Mapping[int, float] | None = None,
) -> list[str]:
    """Return ordered recommendations; never empty.

    The overall-tier message comes first. Then, per pillar in ascending id,
    the coverage message (completion below threshold) followed by the
    pillar template (score below threshold). Pillars missing from
    ``pillar_scores`` or ``completion`` count as 0. Coverage messages are
    skipped when ``completion`` is not given.
    """
    messages = [overall_message(overall_score)]
    for pillar_id in PILLAR_IDS:
        if completion is not None and completion.get(pillar_id, 0.0) < PILLAR_COMPLETION_THRESHOLD:
            messages.append(COMPLETION_MESSAGE_TEMPLATE.format(pillar_id=pillar_id))
        if pillar_scores.get(pillar_id, 0.0) < PILLAR_IMPROVEMENT_THRESHOLD:
            messages.append(PILLAR_IMPROVEMENT_MESSAGES[pillar_id])
    return messages
