"""Pick Schemas — create/edit/reorder requests with field-level validation.

Invariants:
    - category restricted to the closed Category set
    - rank >= 1 when given; ranks 1-3 are featured
    - title stripped, non-empty
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from threesby.core.domain_types import Category


class PickCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: Category
    rank: int | None = Field(None, ge=1)
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    image_url: str | None = Field(None, max_length=2000)
    reference: str | None = Field(None, max_length=2000)
    tags: list[str] = Field(default_factory=list, max_length=20)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty or whitespace")
        return v


class PickUpdate(BaseModel):
    """Partial edit. Sending rank: null explicitly moves the pick out of the top 3."""
    model_config = ConfigDict(extra="forbid")

    category: Category | None = None
    rank: int | None = Field(None, ge=1)
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    image_url: str | None = Field(None, max_length=2000)
    reference: str | None = Field(None, max_length=2000)
    tags: list[str] | None = Field(None, max_length=20)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty or whitespace")
        return v


class PickReorder(BaseModel):
    category: Category
    pick_ids: list[UUID] = Field(min_length=1)


class PickResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    profile_id: UUID
    category: str
    rank: int | None
    status: str
    title: str
    description: str | None
    image_url: str | None
    reference: str | None
    tags: list[str]
    created_at: datetime
    updated_at: datetime
