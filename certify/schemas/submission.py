"""Submission schemas: application updates, indicator answers and evidence.

Wire format is camelCase (indicatorId, rawValue, ...); snake_case field names
are accepted too.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from certify.schemas.enums import ApplicationStatus

# Statuses a submitter may set; review states belong to the admin workflow.
SUBMITTER_STATUSES = frozenset({ApplicationStatus.DRAFT, ApplicationStatus.SUBMITTED})


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TextEvidenceIn(_CamelModel):
    description: str | None = None


class LinkEvidenceIn(_CamelModel):
    url: str | None = None
    description: str | None = None


class FileEvidenceIn(_CamelModel):
    file_name: str | None = Field(None, alias="fileName")
    file_size: int | None = Field(None, alias="fileSize")
    file_type: str | None = Field(None, alias="fileType")
    url: str | None = None
    description: str | None = None


class EvidencePayload(_CamelModel):
    """Evidence bundle for one indicator. Any sub-payload may be absent or blank."""

    text: TextEvidenceIn | None = None
    link: LinkEvidenceIn | None = None
    file: FileEvidenceIn | None = None


class IndicatorSubmission(_CamelModel):
    """One flat indicator answer.

    indicator_id and pillar_id are optional so incomplete entries can be
    dropped by the reconciler instead of failing the whole request.
    normalized_score is accepted for compatibility and ignored; scores are
    always computed server-side. max_score bounds a bare "Score" unit of an
    indicator outside the catalog.
    """

    indicator_id: str | None = Field(None, alias="indicatorId")
    pillar_id: int | str | None = Field(None, alias="pillarId")
    raw_value: Any = Field(None, alias="rawValue")
    normalized_score: float | None = Field(None, alias="normalizedScore")
    measurement_unit: str | None = Field(None, alias="measurementUnit")
    max_score: float | None = Field(None, alias="maxScore")
    has_evidence: bool = Field(False, alias="hasEvidence")
    evidence: EvidencePayload | None = None


def _submitter_status(value: str | None) -> ApplicationStatus | None:
    if value is None:
        return None
    try:
        status = ApplicationStatus(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"unknown status: {value!r}") from None
    if status not in SUBMITTER_STATUSES:
        raise ValueError(f"status {status.value} cannot be set by the submitter")
    return status


class ApplicationUpdateRequest(_CamelModel):
    """Full-state save of an application (PUT /api/applications/{id})."""

    status: ApplicationStatus | None = None
    institution_data: dict[str, Any] | None = Field(None, alias="institutionData")
    pillar_data: dict[str, Any] | None = Field(None, alias="pillarData")
    indicator_responses: list[IndicatorSubmission] | None = Field(
        None, alias="indicatorResponses"
    )
    compute_scores: bool = Field(False, alias="computeScores")

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> ApplicationStatus | None:
        return _submitter_status(value)


class IndicatorSaveRequest(_CamelModel):
    """Partial save of a single indicator."""

    pillar_id: int | str | None = Field(None, alias="pillarId")
    raw_value: Any = Field(None, alias="rawValue")
    measurement_unit: str | None = Field(None, alias="measurementUnit")
    max_score: float | None = Field(None, alias="maxScore")
    has_evidence: bool = Field(False, alias="hasEvidence")
    evidence: EvidencePayload | None = None


class CreateApplicationRequest(_CamelModel):
    institution_data: dict[str, Any] | None = Field(None, alias="institutionData")


class PreviewRequest(_CamelModel):
    """Stateless scoring input: a flat response list or a pillar_<n> map."""

    indicator_responses: list[IndicatorSubmission] | None = Field(
        None, alias="indicatorResponses"
    )
    pillar_data: dict[str, Any] | None = Field(None, alias="pillarData")
