"""Records — shared reads and conditional writes used by every lifecycle service.

Invariants:
    - Reads use populate_existing: a gate never runs on a stale identity-map copy
    - Status writes are compare-and-swap UPDATEs (WHERE status = :expected);
      rowcount 0 means another actor won the race -> StaleStateError
    - Source/target states always come from core/transitions.py
    - Nothing here commits; the calling service owns the transaction (services/transaction.py)

Design Decisions:
    - Core UPDATE statements over ORM attribute mutation for status fields: the condition
      travels to the database, so the check and the write are one atomic statement
    - synchronize_session=False: callers re-read through these loaders instead
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from threesby.core.errors import ErrorContext, ResourceNotFoundError, StaleStateError
from threesby.core.domain_types import (
    PickId, PickStatus, ProfileId, ProfileStatus, ReviewStatus, is_featured_rank,
)
from threesby.core.transitions import (
    LifecycleAction, pick_sources, pick_target, profile_target, review_target,
)
from threesby.models.pick import Pick
from threesby.models.profile import Profile
from threesby.models.submission_review import SubmissionReview


def profile_context(profile_id: ProfileId, **kwargs) -> ErrorContext:
    return ErrorContext(profile_id=str(profile_id), **kwargs)


async def load_profile(
    db: AsyncSession, profile_id: ProfileId, *, for_update: bool = False,
) -> Profile:
    """Fresh profile row or ResourceNotFoundError."""
    query = (
        select(Profile)
        .where(Profile.id == profile_id)
        .execution_options(populate_existing=True)
    )
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    profile = result.scalar_one_or_none()
    if profile is None:
        raise ResourceNotFoundError("Profile", str(profile_id))
    return profile


async def load_picks(db: AsyncSession, profile_id: ProfileId) -> list[Pick]:
    result = await db.execute(
        select(Pick)
        .where(Pick.profile_id == profile_id)
        .order_by(Pick.category, Pick.rank, Pick.created_at)
        .execution_options(populate_existing=True),
    )
    return list(result.scalars().all())


async def load_owned_pick(db: AsyncSession, profile_id: ProfileId, pick_id: PickId) -> Pick:
    """Pick owned by `profile_id`. Someone else's pick is reported as not found."""
    result = await db.execute(
        select(Pick)
        .where(Pick.id == pick_id, Pick.profile_id == profile_id)
        .execution_options(populate_existing=True),
    )
    pick = result.scalar_one_or_none()
    if pick is None:
        raise ResourceNotFoundError("Pick", str(pick_id))
    return pick


async def load_live_review(db: AsyncSession, profile_id: ProfileId) -> SubmissionReview | None:
    result = await db.execute(
        select(SubmissionReview)
        .where(
            SubmissionReview.profile_id == profile_id,
            SubmissionReview.status == ReviewStatus.PENDING.value,
        )
        .execution_options(populate_existing=True),
    )
    return result.scalar_one_or_none()


async def swap_profile_status(
    db: AsyncSession, profile: Profile, action: LifecycleAction,
    now: datetime, **fields: object,
) -> None:
    """UPDATE profiles SET status=<target> WHERE id=:id AND status=<status we read>."""
    result = await db.execute(
        update(Profile)
        .where(Profile.id == profile.id, Profile.status == profile.status)
        .values(status=profile_target(action).value, updated_at=now, **fields)
        .execution_options(synchronize_session=False),
    )
    if result.rowcount != 1:
        raise StaleStateError(
            f"Profile changed while trying to {action.value.replace('_', ' ')}. "
            "Reload and try again.",
            profile_context(profile.id),
        )


async def close_review(
    db: AsyncSession, review: SubmissionReview, action: LifecycleAction,
    **fields: object,
) -> None:
    """Terminate a live review exactly once (conditional on status='pending')."""
    result = await db.execute(
        update(SubmissionReview)
        .where(
            SubmissionReview.id == review.id,
            SubmissionReview.status == ReviewStatus.PENDING.value,
        )
        .values(status=review_target(action).value, **fields)
        .execution_options(synchronize_session=False),
    )
    if result.rowcount != 1:
        raise StaleStateError(
            "This submission was already handled by someone else.",
            profile_context(review.profile_id, review_id=str(review.id)),
        )


async def move_picks(
    db: AsyncSession, profile_id: ProfileId, action: LifecycleAction,
    only_ids: list[PickId] | None = None,
) -> int:
    """Move the profile's picks per PICK_TRANSITIONS[action]. Returns rows moved."""
    target = pick_target(action)
    if target is None:
        return 0
    query = (
        update(Pick)
        .where(Pick.profile_id == profile_id, Pick.status.in_(pick_sources(action)))
        .values(status=target.value)
        .execution_options(synchronize_session=False)
    )
    if only_ids is not None:
        query = query.where(Pick.id.in_(only_ids))
    result = await db.execute(query)
    return result.rowcount


async def load_public_profile(db: AsyncSession, profile_id: ProfileId) -> Profile:
    """Approved, non-deleted profile. Anything else is reported as not found."""
    profile = await load_profile(db, profile_id)
    if (
        profile.deleted_at is not None
        or profile.status != ProfileStatus.APPROVED.value
    ):
        raise ResourceNotFoundError("Profile", str(profile_id))
    return profile


async def load_published_picks(db: AsyncSession, profile_id: ProfileId) -> list[Pick]:
    """Published picks in ranks 1-3, ordered by category then rank."""
    return [
        p for p in await load_picks(db, profile_id)
        if p.status == PickStatus.PUBLISHED.value and is_featured_rank(p.rank)
    ]
