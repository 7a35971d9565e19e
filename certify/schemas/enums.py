"""Shared enumerations for applications, evidence and certification."""

from __future__ import annotations

from enum import Enum


class ApplicationStatus(str, Enum):
    """Application lifecycle. DRAFT and SUBMITTED are owned by the scoring engine."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    RESUBMISSION_REQUIRED = "RESUBMISSION_REQUIRED"


class CertificationLevel(str, Enum):
    """Certification tier derived from the overall score."""

    NOT_CERTIFIED = "NOT_CERTIFIED"
    CERTIFIED = "CERTIFIED"
    GOLD = "GOLD"


class EvidenceType(str, Enum):
    """Stored evidence row type. Text notes are LINK rows with an empty url."""

    FILE = "FILE"
    LINK = "LINK"
