"""IndicatorResponse: one answer per (application, indicator)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from certify.db.session import Base
from certify.db.types import JSONType


class IndicatorResponse(Base):
    """Persisted indicator answer. Replaced wholesale on every batch resubmission."""

    __tablename__ = "indicator_responses"

    __table_args__ = (
        UniqueConstraint(
            "application_id",
            "indicator_id",
            name="uq_indicator_responses_application_indicator",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False
    )
    indicator_id: Mapped[str] = mapped_column(String(32), nullable=False)
    pillar_id: Mapped[int] = mapped_column(Integer, nullable=False)
    # Number or numeric string, as submitted
    raw_value: Mapped[Any] = mapped_column(JSONType, nullable=True)
    # normalized 0..1 × 100
    normalized_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    measurement_unit: Mapped[str] = mapped_column(String(64), nullable=False)
    # Submitted upper bound for off-catalog score units
    max_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    has_evidence: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
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

    application: Mapped["Application"] = relationship(
        "Application", back_populates="indicator_responses"
    )
    evidence: Mapped[list["Evidence"]] = relationship(
        "Evidence",
        back_populates="indicator_response",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Evidence.id",
    )
