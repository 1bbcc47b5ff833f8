"""InviteCode ORM — one-time token that gates curator signup.

Invariants:
    - code is unique, stored upper-case
    - status pending -> completed at most once (conditional UPDATE)
    - expires_at is authoritative; status 'expired' is only a cached projection of it
    - used_by / used_by_email / used_at set together by the single redeeming UPDATE

Design Decisions:
    - used_by nullable FK: redemption may bind an email before the profile row exists
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from threesby.db.base import Base


class InviteCode(Base):
    """Invitation code issued by a curator or admin."""
    __tablename__ = "invite_codes"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'completed', 'expired')",
            name="ck_invite_codes_status",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    created_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True,
    )
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    used_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=True,
    )
    used_by_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
