"""End-to-end lifecycles across services.

Tests cover:
    - draft -> pending -> rejected -> (blocked until edited) -> pending -> approved
    - approved -> unpublished -> pending -> approved
    - invite issued -> redeemed once -> second code expires unused
"""

import pytest

from threesby.core.errors import CodeExpiredError, GateRejectedError
from threesby.services.records import load_picks


async def test_rejection_round_trip(
    lifecycle, reviews, picks, test_db, curator_id, admin_id, clock,
):
    await lifecycle.submit(curator_id)
    clock.advance(hours=3)
    await reviews.reject(curator_id, admin_id, "Product photos are missing")

    clock.advance(hours=1)
    with pytest.raises(GateRejectedError) as exc:
        await lifecycle.submit(curator_id)
    assert exc.value.reason_code == "RESUBMISSION_BLOCKED"

    gate = await lifecycle.gate_status(curator_id)
    assert gate["rejection_note"] == "Product photos are missing"
    assert gate["can_submit"] is False

    pick_id = (await load_picks(test_db, curator_id))[0].id
    await picks.update(curator_id, pick_id, {"image_url": "https://img.example/1.png"})
    resubmitted = await lifecycle.submit(curator_id)
    assert resubmitted.profile.status == "pending"

    approved = await reviews.approve(curator_id, admin_id)
    assert approved.profile.status == "approved"
    assert approved.profile.rejection_note is None
    assert approved.picks_moved == 9
    assert len(await reviews.review_history(curator_id)) == 2


async def test_flagged_pick_must_be_replaced_before_resubmit(
    lifecycle, reviews, picks, test_db, curator_id, admin_id, clock,
):
    await lifecycle.submit(curator_id)
    flagged_id = (await load_picks(test_db, curator_id))[0].id
    await reviews.reject(curator_id, admin_id, "Broken link", flagged_pick_ids=[flagged_id])

    # the rejected pick no longer counts toward coverage
    with pytest.raises(GateRejectedError) as exc:
        await lifecycle.submit(curator_id)
    assert exc.value.reason_code == "INCOMPLETE_CONTENT"

    clock.advance(minutes=30)
    await picks.update(curator_id, flagged_id, {"reference": "https://fixed.example"})
    result = await lifecycle.submit(curator_id)
    assert result.picks_moved == 9


async def test_unpublish_and_republish(lifecycle, reviews, test_db, approved_id, admin_id):
    await lifecycle.unpublish(approved_id)
    await lifecycle.submit(approved_id)
    result = await reviews.approve(approved_id, admin_id)

    assert result.profile.status == "approved"
    assert {p.status for p in await load_picks(test_db, approved_id)} == {"published"}


async def test_invite_lifecycle(invites, accounts, approved_id, clock):
    used = await invites.issue(approved_id)
    unused = await invites.issue(approved_id)
    used_code, unused_code = used.code, unused.code

    profile = await invites.signup_with_invite(
        used_code, "friend@example.com", "longpassword", accounts,
    )
    assert profile.invite_code == used_code

    clock.advance(days=30)
    with pytest.raises(CodeExpiredError):
        await invites.redeem(unused_code, "late@example.com")
    assert await invites.expire_stale() == 1
    assert (await invites.validate(used_code))["reason"] == "already_used"
