"""SubmissionReview ORM — audit record of one administrator review cycle.

Invariants:
    - Always belongs to a Profile (profile_id FK)
    - At most one row with status='pending' per profile (partial unique index)
    - Leaves 'pending' exactly once (conditional UPDATE), never mutated afterwards
    - reviewed_by / reviewed_at set only by approve/reject

Design Decisions:
    - Uniqueness enforced by the DB: two concurrent submits cannot both insert a live review
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from threesby.db.base import Base

_LIVE = text("status = 'pending'")


class SubmissionReview(Base):
    """One submit -> approve/reject/cancel cycle for a profile."""
    __tablename__ = "submission_reviews"
    __table_args__ = (
        Index(
            "uq_submission_reviews_live", "profile_id",
            unique=True, postgresql_where=_LIVE, sqlite_where=_LIVE,
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'canceled')",
            name="ck_submission_reviews_status",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=True,
    )
    rejection_note: Mapped[str | None] = mapped_column(Text, nullable=True)
