"""ScoreAudit: append-only per-pillar score history."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from certify.db.session import Base
from certify.db.types import JSONType


class ScoreAudit(Base):
    """One pillar's score for one computation event. Never updated or deleted."""

    __tablename__ = "score_audits"

    __table_args__ = (
        Index(
            "ix_score_audits_application_calculated_at",
            "application_id",
            "calculated_at",
            postgresql_ops={"calculated_at": "DESC"},
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    pillar_id: Mapped[int] = mapped_column(Integer, nullable=False)
    pillar_score: Mapped[float] = mapped_column(Float, nullable=False)
    overall_score: Mapped[float] = mapped_column(Float, nullable=False)
    certification_level: Mapped[str] = mapped_column(String(16), nullable=False)
    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    score_data: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    application: Mapped["Application"] = relationship("Application", back_populates="score_audits")
