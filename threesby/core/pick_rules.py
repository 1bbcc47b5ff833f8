"""Pick Rules — rank-slot and approved-profile guards for editing picks.

Invariants:
    - All functions are PURE: no IO, no DB
    - At most one pick per (profile, category, rank) for rank in 1-3
    - A published featured pick of an approved profile never leaves its featured slot
      (so "approved => 3 published picks per category" survives every edit)

Design Decisions:
    - Slot checks here give a friendly error early; the partial unique index in the DB
      is what actually guarantees uniqueness under concurrent writes
"""

from collections.abc import Iterable
from uuid import UUID

from threesby.core.boundary_protocols import PickLike
from threesby.core.domain_types import (
    Category, PickStatus, ProfileStatus, is_featured_rank, status_value,
)


def check_category(category: str) -> dict | None:
    """Category must be one of the closed set."""
    if category in {c.value for c in Category}:
        return None
    return {
        "status": "error",
        "error_code": "UNKNOWN_CATEGORY",
        "message": f"Unknown category '{category}'",
    }


def find_slot_holder(
    picks: Iterable[PickLike], category: str, rank: int | None,
    exclude_id: UUID | None = None,
) -> PickLike | None:
    """The pick occupying (category, rank), ignoring `exclude_id`. None if free or unfeatured."""
    if not is_featured_rank(rank):
        return None
    for pick in picks:
        if pick.id == exclude_id:
            continue
        if pick.category == category and pick.rank == rank:
            return pick
    return None


def check_rank_available(
    picks: Iterable[PickLike], category: str, rank: int | None,
    exclude_id: UUID | None = None,
) -> dict | None:
    holder = find_slot_holder(picks, category, rank, exclude_id)
    if holder is None:
        return None
    return {
        "status": "error",
        "error_code": "RANK_CONFLICT",
        "message": f"Rank {rank} in '{category}' is already taken",
        "category": category,
        "rank": rank,
    }


def _locks_featured_slot(profile_status: str, pick: PickLike) -> bool:
    return (
        status_value(profile_status) == ProfileStatus.APPROVED.value
        and status_value(pick.status) == PickStatus.PUBLISHED.value
        and is_featured_rank(pick.rank)
    )


def check_featured_slot_move(
    profile_status: str, pick: PickLike,
    new_category: str, new_rank: int | None,
) -> dict | None:
    """Approved profiles may not move a published featured pick out of its category/ranks."""
    if not _locks_featured_slot(profile_status, pick):
        return None
    if new_category == pick.category and is_featured_rank(new_rank):
        return None
    return {
        "status": "error",
        "error_code": "PUBLISHED_SLOT_LOCKED",
        "message": (
            "This pick is live on your published profile. "
            "Unpublish your profile before moving it out of the top 3."
        ),
    }


def check_featured_slot_delete(profile_status: str, pick: PickLike) -> dict | None:
    if not _locks_featured_slot(profile_status, pick):
        return None
    return {
        "status": "error",
        "error_code": "PUBLISHED_SLOT_LOCKED",
        "message": (
            "This pick is live on your published profile. "
            "Unpublish your profile before deleting it."
        ),
    }


def plan_reorder(
    category_picks: list[PickLike], ordered_ids: list[UUID], profile_status: str,
) -> tuple[dict[UUID, int] | None, dict | None]:
    """Map each pick id to its new rank (1..n in order).

    `ordered_ids` must list every pick of the category exactly once.
    Returns (plan, None) on success or (None, error) on violation.
    """
    current = {p.id: p for p in category_picks}
    if len(set(ordered_ids)) != len(ordered_ids) or set(ordered_ids) != set(current):
        return None, {
            "status": "error",
            "error_code": "REORDER_MISMATCH",
            "message": "Reorder must list every pick of the category exactly once",
        }
    plan = {pick_id: index + 1 for index, pick_id in enumerate(ordered_ids)}
    for pick_id, new_rank in plan.items():
        pick = current[pick_id]
        error = check_featured_slot_move(profile_status, pick, pick.category, new_rank)
        if error:
            return None, error
    return plan, None
