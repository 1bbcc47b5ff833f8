"""Profile Schemas — curator profile edits, lifecycle responses and the public view.

Invariants:
    - ProfileUpdate never carries status fields (status moves only via lifecycle routes)
    - UnpublishRequest requires confirm == true: unpublishing is never implicit
    - Empty strings are stripped to None so "cleared" and "never set" look the same to the gate

Design Decisions:
    - from_attributes on responses: routes hand ORM rows straight to the schema
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from threesby.schemas.pick import PickResponse
from threesby.schemas.review import ReviewResponse


class ProfileUpdate(BaseModel):
    """Partial update of personal fields. Unset fields are left untouched."""
    model_config = ConfigDict(extra="forbid")

    username: str | None = Field(None, pattern=r"^[a-z0-9_]{3,50}$")
    full_name: str | None = Field(None, max_length=200)
    title: str | None = Field(None, max_length=200)
    bio: str | None = Field(None, max_length=5000)
    location: str | None = Field(None, max_length=200)
    avatar_url: str | None = Field(None, max_length=2000)
    shelf_image_url: str | None = Field(None, max_length=2000)
    social_links: dict[str, str] | None = None

    @field_validator(
        "full_name", "title", "bio", "location", "avatar_url", "shelf_image_url",
    )
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("social_links")
    @classmethod
    def null_links_to_empty(cls, v: dict[str, str] | None) -> dict[str, str]:
        return v or {}


class ProfileResponse(BaseModel):
    """Owner view of a profile, including lifecycle fields."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str | None
    username: str | None
    full_name: str | None
    title: str | None
    bio: str | None
    location: str | None
    avatar_url: str | None
    shelf_image_url: str | None
    social_links: dict
    is_admin: bool
    status: str
    rejection_note: str | None
    last_submitted_at: datetime | None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None


class PublicProfileResponse(BaseModel):
    """Public view: approved profiles only, published featured picks only."""
    id: UUID
    username: str | None
    full_name: str | None
    title: str | None
    bio: str | None
    location: str | None
    avatar_url: str | None
    shelf_image_url: str | None
    social_links: dict
    picks: list[PickResponse]


class GateStatusResponse(BaseModel):
    profile_status: str
    can_submit: bool
    transition_error: dict | None
    gate_error: dict | None
    rejection_note: str | None


class TransitionResponse(BaseModel):
    """Result of a lifecycle action."""
    profile: ProfileResponse
    review: ReviewResponse | None = None
    picks_moved: int = 0
    changed: bool = True


class UnpublishRequest(BaseModel):
    confirm: bool = False

    @model_validator(mode="after")
    def require_confirmation(self):
        if not self.confirm:
            raise ValueError("unpublish requires confirm: true")
        return self
