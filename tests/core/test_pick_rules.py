"""Pick Rules — tests for rank-slot uniqueness and the approved-profile slot lock.

Tests cover:
    - check_category closed set
    - check_rank_available ignores the pick being edited and non-featured ranks
    - published featured picks of approved profiles cannot leave the top 3
    - plan_reorder validates the id set and respects the slot lock
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from threesby.core.pick_rules import (
    check_category,
    check_featured_slot_delete,
    check_featured_slot_move,
    check_rank_available,
    find_slot_holder,
    plan_reorder,
)


@dataclass
class _Pick:
    category: str
    rank: int | None
    status: str = "draft"
    updated_at: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)
    id: UUID = field(default_factory=uuid4)


def test_check_category_accepts_known():
    assert check_category("books") is None


def test_check_category_rejects_unknown():
    assert check_category("movies")["error_code"] == "UNKNOWN_CATEGORY"


def test_rank_conflict_when_slot_taken():
    picks = [_Pick("books", 1)]
    error = check_rank_available(picks, "books", 1)
    assert error["error_code"] == "RANK_CONFLICT"
    assert error["rank"] == 1


def test_rank_available_in_other_category():
    assert check_rank_available([_Pick("books", 1)], "places", 1) is None


def test_rank_available_when_editing_the_holder():
    holder = _Pick("books", 2)
    assert check_rank_available([holder], "books", 2, exclude_id=holder.id) is None


def test_non_featured_ranks_never_conflict():
    picks = [_Pick("books", 5), _Pick("books", None)]
    assert check_rank_available(picks, "books", 5) is None
    assert find_slot_holder(picks, "books", None) is None


def test_slot_lock_blocks_moving_published_pick_on_approved_profile():
    pick = _Pick("books", 1, "published")
    error = check_featured_slot_move("approved", pick, "books", None)
    assert error["error_code"] == "PUBLISHED_SLOT_LOCKED"
    assert check_featured_slot_move("approved", pick, "places", 1) is not None


def test_slot_lock_allows_moving_within_top_three():
    pick = _Pick("books", 1, "published")
    assert check_featured_slot_move("approved", pick, "books", 3) is None


def test_slot_lock_only_applies_to_approved_profiles():
    pick = _Pick("books", 1, "published")
    assert check_featured_slot_move("unpublished", pick, "books", None) is None
    assert check_featured_slot_delete("draft", pick) is None


def test_slot_lock_blocks_delete():
    pick = _Pick("places", 3, "published")
    assert check_featured_slot_delete("approved", pick)["error_code"] == (
        "PUBLISHED_SLOT_LOCKED"
    )


def test_draft_pick_on_approved_profile_is_free():
    pick = _Pick("books", 4, "draft")
    assert check_featured_slot_delete("approved", pick) is None


def test_plan_reorder_assigns_ranks_in_order():
    a, b, c = _Pick("books", 1), _Pick("books", 2), _Pick("books", 3)
    plan, error = plan_reorder([a, b, c], [c.id, a.id, b.id], "draft")
    assert error is None
    assert plan == {c.id: 1, a.id: 2, b.id: 3}


def test_plan_reorder_rejects_missing_or_duplicate_ids():
    a, b = _Pick("books", 1), _Pick("books", 2)
    _, error = plan_reorder([a, b], [a.id], "draft")
    assert error["error_code"] == "REORDER_MISMATCH"
    _, error = plan_reorder([a, b], [a.id, a.id], "draft")
    assert error["error_code"] == "REORDER_MISMATCH"


def test_plan_reorder_respects_slot_lock():
    picks = [_Pick("books", r, "published") for r in (1, 2, 3)] + [_Pick("books", 4)]
    ordered = [picks[3].id, picks[0].id, picks[1].id, picks[2].id]
    _, error = plan_reorder(picks, ordered, "approved")
    assert error["error_code"] == "PUBLISHED_SLOT_LOCKED"
