"""Tests for scripts/recompute_scores.py."""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

import pytest

from certify.models import ScoreAudit
from certify.schemas.submission import ApplicationUpdateRequest
from certify.services.reconciler import reconcile

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "recompute_scores.py"


@pytest.fixture
def script(db, monkeypatch: pytest.MonkeyPatch):
    """The script module with its session factory bound to the test session."""
    spec = importlib.util.spec_from_file_location("recompute_scores", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    monkeypatch.setattr(module, "SessionLocal", lambda: db)
    # The script closes its session; keep the shared test session usable afterwards.
    monkeypatch.setattr(db, "close", lambda: None)
    return module


def _run(script, monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["recompute_scores.py", *args])
    return script.main()


class TestRecomputeScript:
    def test_writes_new_audit_event(self, script, db, application, catalog, full_marks, monkeypatch, capsys) -> None:
        reconcile(
            db,
            application.id,
            "user-1",
            ApplicationUpdateRequest.model_validate({"indicatorResponses": full_marks()}),
            catalog,
        )
        code = _run(script, monkeypatch, "--application-id", str(application.id), "--user-id", "user-1")
        assert code == 0
        assert db.query(ScoreAudit).count() == 6
        out = capsys.readouterr().out
        assert "overall=100.00 level=GOLD" in out
        assert "score audit written=True" in out

    def test_dry_run_writes_nothing(self, script, db, application, monkeypatch, capsys) -> None:
        code = _run(
            script, monkeypatch, "--application-id", str(application.id), "--user-id", "user-1", "--dry-run"
        )
        assert code == 0
        assert db.query(ScoreAudit).count() == 0
        assert "score audit written=False" in capsys.readouterr().out

    def test_unknown_application_exits_1(self, script, db, monkeypatch, capsys) -> None:
        code = _run(script, monkeypatch, "--application-id", "9999", "--user-id", "user-1")
        assert code == 1
        assert "ERROR" in capsys.readouterr().err

    @pytest.mark.parametrize("status", ["REJECTED", "RESUBMISSION_REQUIRED", "UNDER_REVIEW"])
    def test_review_status_is_kept(self, script, db, application, catalog, full_marks, monkeypatch, status) -> None:
        reconcile(
            db,
            application.id,
            "user-1",
            ApplicationUpdateRequest.model_validate({"indicatorResponses": full_marks()}),
            catalog,
        )
        application.status = status
        db.commit()
        code = _run(script, monkeypatch, "--application-id", str(application.id), "--user-id", "user-1")
        assert code == 0
        db.refresh(application)
        assert application.status == status
        assert db.query(ScoreAudit).count() == 6
