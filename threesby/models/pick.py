"""Pick ORM — one ranked recommendation in a fixed category.

Invariants:
    - Always belongs to a Profile (profile_id FK)
    - category in {books, products, places}; rank 1-3 is featured, anything else is not
    - At most one pick per (profile, category, rank) for rank 1-3 (partial unique index)
    - updated_at is the CONTENT edit time: stamped on create/edit, never on status moves
      (the resubmission gate compares it against profiles.last_submitted_at)

Design Decisions:
    - Partial unique index instead of app-side checks: concurrent edits cannot double-book a slot
    - rank nullable: unranked picks are kept as drafts outside the top 3
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Index, Integer, JSON, String, Text, text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from threesby.db.base import Base

_FEATURED = text("rank BETWEEN 1 AND 3")


class Pick(Base):
    """Pick entity — a curator's recommendation."""
    __tablename__ = "picks"
    __table_args__ = (
        Index(
            "uq_picks_featured_slot", "profile_id", "category", "rank",
            unique=True, postgresql_where=_FEATURED, sqlite_where=_FEATURED,
        ),
        CheckConstraint(
            "category IN ('books', 'products', 'places')", name="ck_picks_category",
        ),
        CheckConstraint(
            "status IN ('draft', 'pending_review', 'published', 'rejected')",
            name="ck_picks_status",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True,
    )
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft",
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    reference: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
