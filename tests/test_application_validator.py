"""Tests for application completeness validation."""

from __future__ import annotations

import pytest

from certify.schemas.submission import ApplicationUpdateRequest
from certify.services.application_validator import validate_application, validate_institution_data
from certify.services.errors import ApplicationNotFoundError
from certify.services.reconciler import reconcile

USER = "user-1"


def _save(db, application, catalog, answers: list[dict]) -> None:
    update = ApplicationUpdateRequest.model_validate({"indicatorResponses": answers})
    reconcile(db, application.id, USER, update, catalog)


class TestInstitutionData:
    def test_complete(self, application) -> None:
        assert validate_institution_data(application.institution_data) == []

    def test_missing_everything(self) -> None:
        assert validate_institution_data(None) == [
            "Institution Name",
            "Industry",
            "Organization Size",
            "Country",
            "Contact Email",
        ]

    @pytest.mark.parametrize(
        "field,value,label",
        [
            ("name", "A", "Institution Name"),
            ("contactEmail", "not-an-email", "Contact Email"),
            ("country", "   ", "Country"),
        ],
    )
    def test_invalid_field(self, application, field: str, value: str, label: str) -> None:
        data = dict(application.institution_data, **{field: value})
        assert validate_institution_data(data) == [label]


class TestValidateApplication:
    def test_empty_application(self, db, application, catalog) -> None:
        report = validate_application(db, application.id, USER, catalog)
        assert report["isValid"] is False
        assert report["completion"] == 0.0
        assert report["institution"]["isValid"] is True
        assert report["missingItems"] == [f"No indicators found for Pillar {pid}" for pid in range(1, 7)]

    def test_complete_application(self, db, application, catalog, full_marks) -> None:
        _save(db, application, catalog, full_marks())
        report = validate_application(db, application.id, USER, catalog)
        assert report["isValid"] is True
        assert report["completion"] == 100.0
        assert report["missingItems"] == []
        assert [p["complete"] for p in report["pillars"]] == [16, 12, 16, 11, 9, 9]

    def test_missing_evidence_is_reported(self, db, application, catalog, full_marks) -> None:
        answers = full_marks()
        for answer in answers:
            if answer["indicatorId"] == "2.1.1":
                answer["hasEvidence"] = False
                answer.pop("evidence")
        _save(db, application, catalog, answers)
        report = validate_application(db, application.id, USER, catalog)
        assert report["isValid"] is False
        assert report["missingItems"] == ["Indicator 2.1.1 - Evidence required"]
        pillar_2 = report["pillars"][1]
        assert pillar_2["complete"] == 11
        assert pillar_2["present"] == 12

    def test_evidence_only_answer_needs_value(self, db, application, catalog) -> None:
        _save(
            db,
            application,
            catalog,
            [{"indicatorId": "1.1.1", "pillarId": 1, "rawValue": None, "evidence": {"text": {"description": "x"}}}],
        )
        report = validate_application(db, application.id, USER, catalog)
        assert "Indicator 1.1.1 - No value provided" in report["missingItems"]

    def test_incomplete_institution(self, db, application, catalog, full_marks) -> None:
        application.institution_data = {"name": "Acme"}
        db.commit()
        _save(db, application, catalog, full_marks())
        report = validate_application(db, application.id, USER, catalog)
        assert report["institution"]["missingFields"] == [
            "Industry",
            "Organization Size",
            "Country",
            "Contact Email",
        ]
        assert report["missingItems"][0] == "Institution information is incomplete: Industry"

    def test_foreign_application(self, db, application, catalog) -> None:
        with pytest.raises(ApplicationNotFoundError):
            validate_application(db, application.id, "user-2", catalog)
