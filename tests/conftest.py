"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

# Force an in-memory SQLite database before anything imports certify.db; don't inherit from .env
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RECONCILE_TIMEOUT_SECONDS"] = "30"
os.environ["CERTIFICATION_VALIDITY_DAYS"] = "365"

TEST_USER_ID = "user-1"
OTHER_USER_ID = "user-2"

INSTITUTION = {
    "name": "Acme Research Institute",
    "industry": "Education",
    "organizationSize": "201-500",
    "country": "Kenya",
    "contactEmail": "innovation@acme.example.com",
}


@pytest.fixture
def db() -> Session:
    """Database session on a fresh schema; tables are dropped after each test."""
    import certify.models  # noqa: F401
    from certify.db.session import Base, SessionLocal, engine

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def catalog():
    """The bundled indicator catalog."""
    from certify.catalog.loader import get_catalog

    return get_catalog()


@pytest.fixture
def application(db: Session):
    """A DRAFT application owned by TEST_USER_ID."""
    from certify.services.reconciler import create_application

    return create_application(db, TEST_USER_ID, dict(INSTITUTION))


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    from certify.main import app

    return TestClient(app)


@pytest.fixture
def api_client(db: Session):
    """TestClient with get_db overridden to use the test db session."""
    from certify.db.session import get_db
    from certify.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    c = TestClient(app)
    yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-User-Id": TEST_USER_ID}


def _full_marks(catalog, with_evidence: bool = True) -> list[dict]:
    """One top-of-scale answer per catalog indicator, in wire (camelCase) form."""
    from certify.catalog.units import UnitKind

    answers = []
    for definition in catalog.indicators.values():
        unit = definition.unit
        if unit.kind is UnitKind.SCORE:
            raw = unit.max_value
        elif unit.kind is UnitKind.PERCENTAGE:
            raw = 100
        elif unit.kind is UnitKind.COUNT:
            raw = unit.benchmark
        elif unit.kind is UnitKind.RATIO:
            raw = "1:0"
        else:
            raw = 1
        entry = {
            "indicatorId": definition.id,
            "pillarId": definition.pillar_id,
            "rawValue": raw,
            "measurementUnit": unit.label,
            "hasEvidence": with_evidence,
        }
        if with_evidence:
            entry["evidence"] = {"text": {"description": f"Evidence for {definition.id}"}}
        answers.append(entry)
    return answers


@pytest.fixture
def full_marks(catalog):
    """Factory for a complete, top-scoring indicator batch."""

    def _make(with_evidence: bool = True) -> list[dict]:
        return _full_marks(catalog, with_evidence)

    return _make
