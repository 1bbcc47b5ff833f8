"""Invite Schemas — issuing, validating and signing up with invitation codes.

Invariants:
    - Codes are normalized (strip + upper) before reaching the service
    - Signup password length bounded here; strength policy belongs to the auth service
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from threesby.core.invite_rules import normalize_code

_EMAIL = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class InviteIssueRequest(BaseModel):
    email: str | None = Field(None, max_length=320, pattern=_EMAIL)


class InviteValidateRequest(BaseModel):
    code: str = Field(min_length=1, max_length=32)

    @field_validator("code")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_code(v)


class SignupRequest(BaseModel):
    code: str = Field(min_length=1, max_length=32)
    email: str = Field(max_length=320, pattern=_EMAIL)
    password: str = Field(min_length=8, max_length=200)
    full_name: str | None = Field(None, max_length=200)
    username: str | None = Field(None, pattern=r"^[a-z0-9_]{3,50}$")

    @field_validator("code")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_code(v)


class InviteValidation(BaseModel):
    valid: bool
    reason: str | None


class InviteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    email: str | None
    status: str
    expires_at: datetime
    used_by_email: str | None
    used_at: datetime | None
    created_at: datetime


class IssuedInviteItem(BaseModel):
    invite: InviteResponse
    effective_status: str
