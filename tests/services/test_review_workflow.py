"""Review Workflow — approve/reject against a real (SQLite) store.

Tests cover:
    - approve publishes pending_review picks and closes the live review in one commit
    - approve re-checks coverage and writes nothing when picks drifted
    - reject requires a note; flagged picks become rejected, the rest stay pending_review
    - acting on a review that is no longer live is a StaleStateError
    - conditional writes refuse a stale status read
    - queue and history ordering
"""

from types import SimpleNamespace

import pytest
from sqlalchemy import update

from threesby.core.errors import (
    DomainValidationError, InsufficientPicksError, InvalidTransitionError,
    PermissionDeniedError, StaleStateError,
)
from threesby.core.transitions import LifecycleAction
from threesby.models.pick import Pick
from threesby.models.profile import Profile
from threesby.services.records import (
    close_review, load_live_review, load_picks, load_profile, swap_profile_status,
)
from threesby.services.transaction import atomic


async def _submitted(lifecycle, profile_id):
    result = await lifecycle.submit(profile_id)
    return result.review.id


# ─── approve ────────────────────────────────────────────────────

async def test_approve_publishes_everything_together(
    lifecycle, reviews, test_db, curator_id, admin_id, clock,
):
    review_id = await _submitted(lifecycle, curator_id)
    clock.advance(hours=2)

    result = await reviews.approve(curator_id, admin_id)

    assert result.profile.status == "approved"
    assert result.picks_moved == 9
    assert result.review.id == review_id
    assert result.review.status == "approved"
    assert result.review.reviewed_by == admin_id
    assert {p.status for p in await load_picks(test_db, curator_id)} == {"published"}
    assert await load_live_review(test_db, curator_id) is None


async def test_approve_refuses_drifted_picks_and_writes_nothing(
    lifecycle, reviews, test_db, curator_id, admin_id,
):
    review_id = await _submitted(lifecycle, curator_id)
    drifted_id = (await load_picks(test_db, curator_id))[0].id
    await test_db.execute(
        update(Pick).where(Pick.id == drifted_id).values(status="draft"),
    )
    await test_db.commit()

    with pytest.raises(InsufficientPicksError) as exc:
        await reviews.approve(curator_id, admin_id)

    assert exc.value.details["error_code"] == "INSUFFICIENT_PICKS"
    assert (await load_profile(test_db, curator_id)).status == "pending"
    statuses = [p.status for p in await load_picks(test_db, curator_id)]
    assert "published" not in statuses
    live = await load_live_review(test_db, curator_id)
    assert live is not None and live.id == review_id


async def test_non_admin_cannot_approve(lifecycle, reviews, curator_id, approved_id):
    await _submitted(lifecycle, curator_id)
    with pytest.raises(PermissionDeniedError):
        await reviews.approve(curator_id, approved_id)


async def test_approve_draft_profile_is_invalid_transition(reviews, curator_id, admin_id):
    with pytest.raises(InvalidTransitionError):
        await reviews.approve(curator_id, admin_id)


async def test_pending_profile_without_live_review(reviews, make_profile, admin_id):
    profile_id = await make_profile(status="pending")
    with pytest.raises(InvalidTransitionError) as exc:
        await reviews.approve(profile_id, admin_id)
    assert exc.value.details["error_code"] == "NO_LIVE_REVIEW"


async def test_second_decision_on_same_review_is_stale(
    lifecycle, reviews, test_db, curator_id, admin_id,
):
    review_id = await _submitted(lifecycle, curator_id)
    await reviews.approve(curator_id, admin_id, expected_review_id=review_id)

    with pytest.raises(StaleStateError):
        await reviews.reject(
            curator_id, admin_id, "too late", expected_review_id=review_id,
        )
    assert (await load_profile(test_db, curator_id)).status == "approved"


async def test_approve_after_cancel_and_resubmit_targets_new_review(
    lifecycle, reviews, curator_id, admin_id,
):
    old_review_id = await _submitted(lifecycle, curator_id)
    await lifecycle.cancel_submission(curator_id)
    await _submitted(lifecycle, curator_id)

    with pytest.raises(StaleStateError):
        await reviews.approve(curator_id, admin_id, expected_review_id=old_review_id)


# ─── reject ─────────────────────────────────────────────────────

async def test_reject_requires_note(lifecycle, reviews, curator_id, admin_id):
    await _submitted(lifecycle, curator_id)
    with pytest.raises(DomainValidationError) as exc:
        await reviews.reject(curator_id, admin_id, "   ")
    assert exc.value.field == "note"


async def test_reject_keeps_picks_pending_review(
    lifecycle, reviews, test_db, curator_id, admin_id,
):
    await _submitted(lifecycle, curator_id)

    result = await reviews.reject(curator_id, admin_id, "Places need photos")

    assert result.profile.status == "rejected"
    assert result.profile.rejection_note == "Places need photos"
    assert result.review.status == "rejected"
    assert result.review.rejection_note == "Places need photos"
    assert result.picks_moved == 0
    assert {p.status for p in await load_picks(test_db, curator_id)} == {"pending_review"}


async def test_reject_flags_selected_picks(
    lifecycle, reviews, picks, test_db, curator_id, admin_id, clock,
):
    await _submitted(lifecycle, curator_id)
    flagged_id = (await load_picks(test_db, curator_id))[0].id

    result = await reviews.reject(
        curator_id, admin_id, "Fix this one", flagged_pick_ids=[flagged_id, flagged_id],
    )

    assert result.picks_moved == 1
    by_id = {p.id: p.status for p in await load_picks(test_db, curator_id)}
    assert by_id.pop(flagged_id) == "rejected"
    assert set(by_id.values()) == {"pending_review"}

    clock.advance(minutes=5)
    edited = await picks.update(curator_id, flagged_id, {"title": "Better title"})
    assert edited.status == "draft"


async def test_reject_refuses_foreign_flagged_pick(
    lifecycle, reviews, test_db, curator_id, approved_id, admin_id,
):
    await _submitted(lifecycle, curator_id)
    foreign_id = (await load_picks(test_db, approved_id))[0].id

    with pytest.raises(DomainValidationError) as exc:
        await reviews.reject(curator_id, admin_id, "no", flagged_pick_ids=[foreign_id])

    assert exc.value.field == "flagged_pick_ids"
    assert (await load_profile(test_db, curator_id)).status == "pending"


# ─── conditional writes ─────────────────────────────────────────

async def test_status_swap_refuses_stale_read(lifecycle, test_db, curator_id, clock):
    await _submitted(lifecycle, curator_id)
    stale = SimpleNamespace(id=curator_id, status="draft")

    with pytest.raises(StaleStateError):
        async with atomic(test_db):
            await swap_profile_status(
                test_db, stale, LifecycleAction.SUBMIT, clock.now(),
            )
    assert (await load_profile(test_db, curator_id)).status == "pending"


async def test_review_closes_only_once(lifecycle, test_db, curator_id, clock):
    await _submitted(lifecycle, curator_id)
    review = await load_live_review(test_db, curator_id)
    stale = SimpleNamespace(id=review.id, profile_id=curator_id)

    async with atomic(test_db):
        await close_review(test_db, stale, LifecycleAction.CANCEL)
    with pytest.raises(StaleStateError):
        async with atomic(test_db):
            await close_review(test_db, stale, LifecycleAction.CANCEL)


# ─── queue / history ────────────────────────────────────────────

async def test_list_pending_oldest_first_with_counts(
    lifecycle, reviews, curator_id, make_profile, make_shelf, clock,
):
    await _submitted(lifecycle, curator_id)
    clock.advance(hours=1)
    later_id = await make_profile()
    await make_shelf(later_id)
    await _submitted(lifecycle, later_id)

    queue = await reviews.list_pending()

    assert [item["profile"].id for item in queue] == [curator_id, later_id]
    assert queue[0]["pick_counts"] == {"pending_review": 9}


async def test_list_pending_empty(reviews):
    assert await reviews.list_pending() == []


async def test_review_history_newest_first(
    lifecycle, reviews, picks, test_db, curator_id, admin_id, clock,
):
    first_id = await _submitted(lifecycle, curator_id)
    await reviews.reject(curator_id, admin_id, "Needs work")
    clock.advance(days=1)
    pick_id = (await load_picks(test_db, curator_id))[0].id
    await picks.update(curator_id, pick_id, {"description": "now with notes"})
    second_id = await _submitted(lifecycle, curator_id)

    history = await reviews.review_history(curator_id)

    assert [r.id for r in history] == [second_id, first_id]
    assert [r.status for r in history] == ["pending", "rejected"]


async def test_review_history_sees_closed_review_in_same_session(
    lifecycle, reviews, test_db, curator_id,
):
    review_id = await _submitted(lifecycle, curator_id)
    assert [r.status for r in await reviews.review_history(curator_id)] == ["pending"]

    review = await load_live_review(test_db, curator_id)
    async with atomic(test_db):
        await close_review(test_db, review, LifecycleAction.CANCEL)

    history = await reviews.review_history(curator_id)
    assert [(r.id, r.status) for r in history] == [(review_id, "canceled")]


async def test_list_pending_sees_profile_edits_in_same_session(
    lifecycle, reviews, test_db, curator_id,
):
    await _submitted(lifecycle, curator_id)
    assert (await reviews.list_pending())[0]["profile"].full_name == "Ada Reader"

    async with atomic(test_db):
        await test_db.execute(
            update(Profile)
            .where(Profile.id == curator_id)
            .values(full_name="Ada Lovelace")
            .execution_options(synchronize_session=False),
        )

    assert (await reviews.list_pending())[0]["profile"].full_name == "Ada Lovelace"
