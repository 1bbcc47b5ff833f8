"""Initial schema — profiles, picks, submission_reviews, invite_codes, collections.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("username", sa.String(50), nullable=True, unique=True),
        sa.Column("full_name", sa.String(200), nullable=True),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("avatar_url", sa.String(2000), nullable=True),
        sa.Column("shelf_image_url", sa.String(2000), nullable=True),
        sa.Column("social_links", sa.JSON, nullable=False, server_default="{}"),
        sa.Column("is_admin", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("invite_code", sa.String(32), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("rejection_note", sa.Text, nullable=True),
        sa.Column("last_submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('draft', 'pending', 'approved', 'rejected', 'unpublished')",
            name="ck_profiles_status",
        ),
    )

    op.create_table(
        "picks",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("profile_id", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("rank", sa.Integer, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("image_url", sa.String(2000), nullable=True),
        sa.Column("reference", sa.String(2000), nullable=True),
        sa.Column("tags", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "category IN ('books', 'products', 'places')", name="ck_picks_category",
        ),
        sa.CheckConstraint(
            "status IN ('draft', 'pending_review', 'published', 'rejected')",
            name="ck_picks_status",
        ),
    )
    op.create_index("ix_picks_profile_id", "picks", ["profile_id"])
    op.create_index(
        "uq_picks_featured_slot", "picks", ["profile_id", "category", "rank"],
        unique=True, postgresql_where=sa.text("rank BETWEEN 1 AND 3"),
    )

    op.create_table(
        "submission_reviews",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("profile_id", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("rejection_note", sa.Text, nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'canceled')",
            name="ck_submission_reviews_status",
        ),
    )
    op.create_index("ix_submission_reviews_profile_id", "submission_reviews", ["profile_id"])
    # At most one live review per profile
    op.create_index(
        "uq_submission_reviews_live", "submission_reviews", ["profile_id"],
        unique=True, postgresql_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "invite_codes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("code", sa.String(32), nullable=False, unique=True),
        sa.Column("created_by", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_by", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("used_by_email", sa.String(320), nullable=True),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "status IN ('pending', 'completed', 'expired')",
            name="ck_invite_codes_status",
        ),
    )
    op.create_index("ix_invite_codes_created_by", "invite_codes", ["created_by"])

    op.create_table(
        "collections",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("profile_id", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("categories", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("pick_ids", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("cover_image_url", sa.String(2000), nullable=True),
        sa.Column("font_color", sa.String(10), nullable=False, server_default="dark"),
        sa.Column("issue_number", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("profile_id", "issue_number", name="uq_collections_issue"),
    )
    op.create_index("ix_collections_profile_id", "collections", ["profile_id"])


def downgrade() -> None:
    op.drop_table("collections")
    op.drop_table("invite_codes")
    op.drop_table("submission_reviews")
    op.drop_table("picks")
    op.drop_table("profiles")
