"""Measurement unit parsing.

Indicator answers arrive with a human-readable unit label ("Score (1-5)",
"Percentage (%)", "Hours per employee", ...). The label is parsed once into a
tagged :class:`MeasurementUnit` so normalization is a match over unit kinds
rather than repeated substring checks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache


class UnitKind(str, Enum):
    """Measurement unit tag."""

    BINARY = "binary"
    SCORE = "score"
    PERCENTAGE = "percentage"
    COUNT = "count"
    RATIO = "ratio"
    UNKNOWN = "unknown"


# Count/hours benchmarks per semantic category: value that maps to a full score.
# Matched against the lower-cased unit label in insertion order.
COUNT_BENCHMARKS: dict[str, float] = {
    "ideas": 200,  # ideas per quarter (3.2.1)
    "hours": 40,  # training hours per employee per year (2.2.3)
    "sources": 10,  # intelligence sources
    "audits": 2,  # audits per year (6.2.2)
    "updates": 4,  # system updates per year (6.3.3)
    "adaptations": 5,  # adaptations per project (3.3.2)
    "iterations": 5,  # iteration cycles (3.3.3)
    "events": 5,  # foreseen events (5.1.4)
}
DEFAULT_COUNT_BENCHMARK: float = 100

DEFAULT_SCORE_MAX: float = 5

_SCORE_BOUNDS_PATTERN = re.compile(r"\(\s*(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)\s*\)")


@dataclass(frozen=True)
class MeasurementUnit:
    """Parsed unit. ``min_value``/``max_value`` apply to SCORE; ``benchmark`` to COUNT."""

    kind: UnitKind
    label: str
    min_value: float = 0.0
    max_value: float = 1.0
    benchmark: float | None = None


def _count_benchmark(label: str) -> float:
    lowered = label.lower()
    for category, benchmark in COUNT_BENCHMARKS.items():
        if category in lowered:
            return benchmark
    return DEFAULT_COUNT_BENCHMARK


def _score_bounds(label: str, max_score: float | None) -> tuple[float, float]:
    """Return (min, max). The scale is 0-based unless the label says otherwise, e.g. "(1-5)"."""
    match = _SCORE_BOUNDS_PATTERN.search(label)
    if match:
        low, high = float(match.group(1)), float(match.group(2))
    else:
        low, high = 0.0, DEFAULT_SCORE_MAX
    if max_score:
        high = float(max_score)
    return low, high


@lru_cache(maxsize=256)
def parse_unit(label: str | None, max_score: float | None = None) -> MeasurementUnit:
    """Parse a unit label into a :class:`MeasurementUnit`.

    Unrecognized labels parse to UNKNOWN (normalizes to 0) rather than raising.
    """
    label = (label or "").strip()
    if "Binary" in label:
        return MeasurementUnit(kind=UnitKind.BINARY, label=label, max_value=1.0)
    if "Score" in label:
        low, high = _score_bounds(label, max_score)
        return MeasurementUnit(kind=UnitKind.SCORE, label=label, min_value=low, max_value=high)
    if "Percentage" in label or label == "%":
        return MeasurementUnit(kind=UnitKind.PERCENTAGE, label=label, max_value=100.0)
    if "Number" in label or "Hours" in label or "Count" in label:
        return MeasurementUnit(
            kind=UnitKind.COUNT, label=label, benchmark=_count_benchmark(label)
        )
    if label == "Ratio":
        return MeasurementUnit(kind=UnitKind.RATIO, label=label)
    return MeasurementUnit(kind=UnitKind.UNKNOWN, label=label)
