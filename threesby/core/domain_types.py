"""Domain Types — identity types, closed vocabularies and slot constants for curation.

Invariants:
    - ProfileId, PickId, ReviewId, CollectionId wrap UUIDs; services take these, not bare UUID
    - Categories are a closed set of 3; each has exactly 3 featured rank slots (1-3)
    - All valid states encoded as Enums — no raw string matching outside this module

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: compare equal to the raw strings stored in DB columns and serialize to JSON as-is
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

ProfileId = NewType("ProfileId", UUID)
PickId = NewType("PickId", UUID)
ReviewId = NewType("ReviewId", UUID)
CollectionId = NewType("CollectionId", UUID)


# ─── Slot Constants ──────────────────────────────────────────────

FEATURED_RANKS: tuple[int, ...] = (1, 2, 3)


def is_featured_rank(rank: int | None) -> bool:
    """Ranks outside 1-3 (or absent) mean 'not featured'."""
    return rank is not None and rank in FEATURED_RANKS


# ─── Enums ───────────────────────────────────────────────────────

class Category(str, Enum):
    """The 3 fixed content buckets. Every curator fills all three."""
    BOOKS = "books"
    PRODUCTS = "products"
    PLACES = "places"


class ProfileStatus(str, Enum):
    """Curator publication lifecycle — maps to profiles.status."""
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    UNPUBLISHED = "unpublished"


class PickStatus(str, Enum):
    """Pick lifecycle — only PUBLISHED is publicly visible."""
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    PUBLISHED = "published"
    REJECTED = "rejected"


class ReviewStatus(str, Enum):
    """SubmissionReview lifecycle — PENDING is the only non-terminal state."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELED = "canceled"


class InviteStatus(str, Enum):
    """Cached invite status. EXPIRED is derived live from expires_at."""
    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"


class FontColor(str, Enum):
    """Collection card text color."""
    DARK = "dark"
    LIGHT = "light"


def status_value(status: "str | Enum") -> str:
    """Raw string of a status, whether given an Enum member or a DB string."""
    return status.value if isinstance(status, Enum) else status
