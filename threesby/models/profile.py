"""Profile ORM — the curator aggregate root, 1:1 with an external auth account.

Invariants:
    - id equals the external account id (no server-generated identity for real users)
    - status is one of ProfileStatus; written only through services/records.py
    - rejection_note set only by reject, cleared by the next successful submit
    - last_submitted_at stamped by every successful submit
    - Never hard-deleted: account deletion anonymizes personal fields and stamps deleted_at

Design Decisions:
    - No ORM relationships to picks/reviews: services always re-query children so a gate
      decision never runs on a stale in-memory collection
    - social_links as JSON: free-form map of network -> URL
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, JSON, String, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from threesby.db.base import Base


class Profile(Base):
    """Curator profile — owns picks, collections, submission reviews and issued invites."""
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'pending', 'approved', 'rejected', 'unpublished')",
            name="ck_profiles_status",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    username: Mapped[str | None] = mapped_column(
        String(50), unique=True, nullable=True,
    )
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    shelf_image_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    social_links: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    invite_code: Mapped[str | None] = mapped_column(String(32), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft",
    )
    rejection_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

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
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
