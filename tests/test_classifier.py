"""Tests for certification tier boundaries."""

from __future__ import annotations

import pytest

from certify.schemas.enums import CertificationLevel
from certify.services.scoring.classifier import classify


@pytest.mark.parametrize(
    "score,expected",
    [
        (0, CertificationLevel.NOT_CERTIFIED),
        (59.99, CertificationLevel.NOT_CERTIFIED),
        (60, CertificationLevel.NOT_CERTIFIED),
        (69.99, CertificationLevel.NOT_CERTIFIED),
        (70, CertificationLevel.CERTIFIED),
        (80, CertificationLevel.CERTIFIED),
        (84.99, CertificationLevel.CERTIFIED),
        (85, CertificationLevel.GOLD),
        (100, CertificationLevel.GOLD),
    ],
)
def test_classify_boundaries(score: float, expected: CertificationLevel) -> None:
    assert classify(score) == expected


def test_classify_returns_str_enum() -> None:
    assert classify(90) == "GOLD"
