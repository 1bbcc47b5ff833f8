"""Publication Gate — decides whether a profile may be submitted or approved.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return error dict on violation, None on success
    - Category coverage is recomputed from the picks passed in on every call (no cached counts)
    - A category is covered when eligible picks occupy ranks 1, 2 and 3
    - Submit counts every non-rejected pick; approve counts only pending_review/published picks

Design Decisions:
    - Pure functions over methods on the ORM model: testable with plain objects, no DB
    - Return dicts (not exceptions): services wrap them in GateRejectedError /
      InsufficientPicksError, and the same dict is shown to the curator as-is
    - Content is checked before profile fields: the content gap is what curators hit first
"""

from collections.abc import Iterable

from threesby.core.boundary_protocols import PickLike, ProfileLike
from threesby.core.domain_types import (
    Category, FEATURED_RANKS, PickStatus, ProfileStatus, status_value,
)
from threesby.core.timestamps import is_strictly_after

# Raw status values: ORM rows carry plain strings.
SUBMIT_ELIGIBLE = frozenset(s.value for s in (
    PickStatus.DRAFT, PickStatus.PENDING_REVIEW, PickStatus.PUBLISHED,
))
APPROVE_ELIGIBLE = frozenset(s.value for s in (
    PickStatus.PENDING_REVIEW, PickStatus.PUBLISHED,
))


def occupied_ranks(
    picks: Iterable[PickLike], eligible: frozenset[str],
) -> dict[Category, set[int]]:
    """Featured ranks held by eligible picks, per category."""
    occupied: dict[Category, set[int]] = {c: set() for c in Category}
    for pick in picks:
        if status_value(pick.status) not in eligible or pick.rank not in FEATURED_RANKS:
            continue
        try:
            category = Category(pick.category)
        except ValueError:
            continue
        occupied[category].add(pick.rank)
    return occupied


def missing_ranks(
    picks: Iterable[PickLike], eligible: frozenset[str],
) -> dict[str, list[int]]:
    """Per-category featured ranks not yet filled. Empty dict means fully covered."""
    occupied = occupied_ranks(picks, eligible)
    missing = {}
    for category in Category:
        gaps = [r for r in FEATURED_RANKS if r not in occupied[category]]
        if gaps:
            missing[category.value] = gaps
    return missing


def check_content(picks: Iterable[PickLike]) -> dict | None:
    """Rule 1: each category needs non-rejected picks in ranks 1-3."""
    missing = missing_ranks(picks, SUBMIT_ELIGIBLE)
    if missing:
        return {
            "status": "error",
            "error_code": "INCOMPLETE_CONTENT",
            "message": (
                "Each category needs 3 ranked picks. Missing: "
                + ", ".join(
                    f"{cat} (rank {', '.join(str(r) for r in ranks)})"
                    for cat, ranks in missing.items()
                )
            ),
            "missing_ranks": missing,
        }
    return None


def check_profile_fields(profile: ProfileLike) -> dict | None:
    """Rule 2: display name, title and at least one image are required."""
    missing = []
    if not (profile.full_name or "").strip():
        missing.append("full_name")
    if not (profile.title or "").strip():
        missing.append("title")
    if not (profile.avatar_url or profile.shelf_image_url):
        missing.append("image")
    if missing:
        return {
            "status": "error",
            "error_code": "INCOMPLETE_PROFILE",
            "message": f"Complete your profile first. Missing: {', '.join(missing)}",
            "missing_fields": missing,
        }
    return None


def can_submit(profile: ProfileLike, picks: Iterable[PickLike]) -> dict | None:
    """Chain content and profile checks. Returns first error or None."""
    picks = list(picks)
    return check_content(picks) or check_profile_fields(profile)


def can_approve(profile: ProfileLike, picks: Iterable[PickLike]) -> dict | None:
    """Re-check coverage at approval time against submitted/published picks only."""
    missing = missing_ranks(picks, APPROVE_ELIGIBLE)
    if missing:
        return {
            "status": "error",
            "error_code": "INSUFFICIENT_PICKS",
            "message": (
                "Cannot approve: picks changed since submission. Missing: "
                + ", ".join(sorted(missing))
            ),
            "missing_ranks": missing,
        }
    return None


def can_resubmit_after_rejection(
    profile: ProfileLike, picks: Iterable[PickLike],
) -> bool:
    """True iff at least one pick was edited strictly after the last submit."""
    return any(
        is_strictly_after(pick.updated_at, profile.last_submitted_at)
        for pick in picks
    )


def check_resubmission(
    profile: ProfileLike, picks: Iterable[PickLike],
) -> dict | None:
    """Rule 3: a rejected profile must change something before resubmitting."""
    if profile.status != ProfileStatus.REJECTED:
        return None
    if can_resubmit_after_rejection(profile, picks):
        return None
    return {
        "status": "error",
        "error_code": "RESUBMISSION_BLOCKED",
        "message": (
            "Your submission was rejected. Update at least one pick "
            "before submitting again."
        ),
    }


def validate_submission(profile: ProfileLike, picks: Iterable[PickLike]) -> dict | None:
    """Everything submit() requires from content. Returns first error or None."""
    picks = list(picks)
    return can_submit(profile, picks) or check_resubmission(profile, picks)
