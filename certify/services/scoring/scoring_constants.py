"""Scoring engine constants: evidence thresholds, tier boundaries, recommendation text.

No magic numbers inside the scoring engine; all values defined here.
"""

from __future__ import annotations

# ── Structure ─────────────────────────────────────────────────────────────

PILLAR_COUNT: int = 6
PILLAR_IDS: tuple[int, ...] = (1, 2, 3, 4, 5, 6)

# ── Caps and rounding ─────────────────────────────────────────────────────

CAP_PERCENTAGE_MAX: float = 100.0
SCORE_DECIMALS: int = 2

# ── Evidence gating ───────────────────────────────────────────────────────

# Score units need evidence when raw exceeds this fraction of the scale max
EVIDENCE_SCORE_FRACTION: float = 0.5
# Percentage units need evidence above this raw value
EVIDENCE_PERCENTAGE_THRESHOLD: float = 50.0
# All other units need evidence for any raw value above this
EVIDENCE_DEFAULT_THRESHOLD: float = 0.0

# ── Certification tiers (evaluated high to low) ───────────────────────────

GOLD_THRESHOLD: float = 85.0
CERTIFIED_THRESHOLD: float = 70.0

# ── Recommendations ───────────────────────────────────────────────────────

# Overall-tier message boundaries; independent of certification thresholds
RECOMMENDATION_EXCELLENCE_THRESHOLD: float = 80.0
RECOMMENDATION_GOLD_PUSH_THRESHOLD: float = 60.0
# Pillars scoring below this get the pillar-specific template
PILLAR_IMPROVEMENT_THRESHOLD: float = 60.0
# Pillars with completion (percent answered) below this get the coverage message
PILLAR_COMPLETION_THRESHOLD: float = 50.0

OVERALL_FOUNDATIONAL_MESSAGE: str = (
    "Focus on building foundational innovation capabilities across all pillars "
    "to achieve certification."
)
OVERALL_GOLD_PUSH_MESSAGE: str = (
    "Strengthen innovation processes and culture to achieve Gold certification level."
)
OVERALL_EXCELLENCE_MESSAGE: str = (
    "Maintain excellence and continue building on your strong innovation foundation."
)

PILLAR_IMPROVEMENT_MESSAGES: dict[int, str] = {
    1: "Strengthen strategic foundation by formalizing innovation intent and improving "
    "leadership engagement.",
    2: "Increase resource allocation for innovation activities and improve "
    "infrastructure support.",
    3: "Enhance innovation processes and foster a more supportive innovation culture.",
    4: "Improve IP management strategy and knowledge sharing systems.",
    5: "Strengthen external intelligence gathering and partnership management.",
    6: "Implement better performance measurement and continuous improvement processes.",
}

COMPLETION_MESSAGE_TEMPLATE: str = (
    "Complete more indicators in Pillar {pillar_id} to improve your assessment coverage."
)
