"""Collection Schemas — themed issues of a curator's picks."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from threesby.core.domain_types import Category, FontColor


class CollectionCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    categories: list[Category] = Field(default_factory=list)
    pick_ids: list[UUID] = Field(default_factory=list)
    cover_image_url: str | None = Field(None, max_length=2000)
    font_color: FontColor = FontColor.DARK


class CollectionUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    categories: list[Category] | None = None
    pick_ids: list[UUID] | None = None
    cover_image_url: str | None = Field(None, max_length=2000)
    font_color: FontColor | None = None


class CollectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    profile_id: UUID
    title: str
    description: str | None
    categories: list[str]
    pick_ids: list[str]
    cover_image_url: str | None
    font_color: str
    issue_number: int
    created_at: datetime
    updated_at: datetime
