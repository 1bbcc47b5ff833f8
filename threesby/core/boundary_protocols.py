"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Clock, code generation and account creation accessed through Protocol types
    - Implementations provided by shell via dependency injection (FastAPI Depends)

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - ProfileLike/PickLike let pure gate functions accept ORM rows or test doubles alike
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from threesby.core.domain_types import PickId, ProfileId


class ProfileLike(Protocol):
    """Structural contract for profiles passed to pure gate functions."""
    id: ProfileId
    status: str
    full_name: str | None
    title: str | None
    avatar_url: str | None
    shelf_image_url: str | None
    last_submitted_at: datetime | None


class PickLike(Protocol):
    """Structural contract for picks passed to pure gate functions."""
    id: PickId
    category: str
    rank: int | None
    status: str
    updated_at: datetime


class Clock(Protocol):
    """Source of the current time. Must return timezone-aware UTC datetimes."""
    def now(self) -> datetime: ...


class CodeGenerator(Protocol):
    """Produces candidate invite code strings (uniqueness enforced by the store)."""
    def generate(self) -> str: ...


class AccountProvider(Protocol):
    """Contract for the external authentication service — implemented by shell."""
    async def create_account(self, email: str, password: str) -> UUID: ...
    async def delete_account(self, account_id: UUID) -> None: ...
