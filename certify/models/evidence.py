"""Evidence: supporting file/link/text rows for an indicator response."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from certify.db.session import Base


class Evidence(Base):
    """One evidence row. The full set for a response is deleted and recreated on resubmission."""

    __tablename__ = "evidence"

    __table_args__ = (
        Index("ix_evidence_indicator_response_id", "indicator_response_id"),
        Index("ix_evidence_application_id", "application_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    indicator_response_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("indicator_responses.id", ondelete="CASCADE"), nullable=False
    )
    application_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(8), nullable=False)
    file_name: Mapped[str | None] = mapped_column(String(512), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    file_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    indicator_response: Mapped["IndicatorResponse"] = relationship(
        "IndicatorResponse", back_populates="evidence"
    )
