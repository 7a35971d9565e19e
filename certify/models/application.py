"""Application: one institution's certification questionnaire."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from certify.db.session import Base
from certify.db.types import JSONType
from certify.schemas.enums import ApplicationStatus


class Application(Base):
    """Certification application owned by one user."""

    __tablename__ = "applications"

    __table_args__ = (Index("ix_applications_user_id", "user_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), default=ApplicationStatus.DRAFT.value, nullable=False
    )
    institution_data: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    pillar_data: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    indicator_responses: Mapped[list["IndicatorResponse"]] = relationship(
        "IndicatorResponse",
        back_populates="application",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    score_audits: Mapped[list["ScoreAudit"]] = relationship(
        "ScoreAudit",
        back_populates="application",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    certification: Mapped["Certification | None"] = relationship(
        "Certification",
        back_populates="application",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
