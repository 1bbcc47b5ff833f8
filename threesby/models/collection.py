"""Collection ORM — a curator's themed grouping of their own picks.

Invariants:
    - Always belongs to a Profile (profile_id FK)
    - pick_ids reference picks of the same profile (checked in services/collection_store.py)
    - issue_number starts at 1 and is unique per profile

Design Decisions:
    - pick_ids as JSON list: ordering matters and collections are small
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from threesby.db.base import Base


class Collection(Base):
    """Collection entity — themed issue of picks."""
    __tablename__ = "collections"
    __table_args__ = (
        UniqueConstraint("profile_id", "issue_number", name="uq_collections_issue"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    categories: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    pick_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    cover_image_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    font_color: Mapped[str] = mapped_column(String(10), nullable=False, default="dark")
    issue_number: Mapped[int] = mapped_column(Integer, nullable=False)
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
