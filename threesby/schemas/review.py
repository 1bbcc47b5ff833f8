"""Review Schemas — admin decisions on pending submissions."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApproveRequest(BaseModel):
    expected_review_id: UUID | None = None


class RejectRequest(BaseModel):
    note: str = Field(min_length=1, max_length=5000)
    flagged_pick_ids: list[UUID] = Field(default_factory=list)
    expected_review_id: UUID | None = None

    @field_validator("note")
    @classmethod
    def strip_note(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("note cannot be empty or whitespace")
        return v


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    profile_id: UUID
    status: str
    submitted_at: datetime
    reviewed_at: datetime | None
    reviewed_by: UUID | None
    rejection_note: str | None


class PendingReviewItem(BaseModel):
    """One row of the admin review queue."""
    review: ReviewResponse
    profile_id: UUID
    username: str | None
    full_name: str | None
    title: str | None
    pick_counts: dict[str, int]
