"""Curator Lifecycle — owner-initiated profile transitions: submit, cancel, unpublish, delete.

Invariants:
    - Every operation is one transaction (services/transaction.py): all writes or none
    - Gate decisions use picks re-read inside the same transaction, never cached counts
    - Profile status only changes through records.swap_profile_status (compare-and-swap)
    - At most one live SubmissionReview per profile: the partial unique index rejects a
      second insert and the IntegrityError surfaces as StaleStateError
    - update_details never touches status fields

Design Decisions:
    - Pure checks first (transition table, gate), writes last: a refused submit performs no IO writes
    - cancel_submission without a live review is a reported no-op, not an error
    - delete_account withdraws the profile from public view before anonymizing it
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from threesby.core.boundary_protocols import Clock
from threesby.core.domain_types import ProfileId, ProfileStatus, ReviewStatus
from threesby.core.errors import (
    DomainValidationError, GateRejectedError, InvalidTransitionError,
    PermissionDeniedError, StaleStateError,
)
from threesby.core.publication_gate import validate_submission
from threesby.core.transitions import LifecycleAction, check_profile_transition
from threesby.models.pick import Pick
from threesby.models.profile import Profile
from threesby.models.submission_review import SubmissionReview
from threesby.services.records import (
    close_review, load_live_review, load_picks, load_profile, load_public_profile,
    load_published_picks, move_picks, profile_context, swap_profile_status,
)
from threesby.services.transaction import atomic

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({
    "username", "full_name", "title", "bio", "location",
    "avatar_url", "shelf_image_url", "social_links",
})


@dataclass
class TransitionResult:
    """Outcome of a lifecycle operation, re-read after commit."""
    profile: Profile
    review: SubmissionReview | None = None
    picks_moved: int = 0
    changed: bool = True


def ensure_active(profile: Profile) -> None:
    if profile.deleted_at is not None:
        raise PermissionDeniedError(
            "This account has been deleted", profile_context(profile.id),
        )


class CuratorLifecycle:
    """Owner-side state machine for a curator profile."""

    def __init__(self, db: AsyncSession, clock: Clock):
        self.db = db
        self.clock = clock

    # ─── Profile records ────────────────────────────────────────

    async def get_or_create(self, profile_id: ProfileId, email: str | None = None) -> Profile:
        """Profiles are created implicitly on the first authenticated request."""
        existing = await self.db.get(Profile, profile_id)
        if existing is not None:
            return existing
        now = self.clock.now()
        try:
            async with atomic(self.db):
                self.db.add(Profile(
                    id=profile_id, email=email,
                    status=ProfileStatus.DRAFT.value,
                    created_at=now, updated_at=now,
                ))
            logger.info("Profile created", extra={"profile_id": profile_id})
        except IntegrityError:
            logger.info(
                "Profile created concurrently", extra={"profile_id": profile_id},
            )
        return await load_profile(self.db, profile_id)

    async def get_profile(self, profile_id: ProfileId) -> Profile:
        return await load_profile(self.db, profile_id)

    async def get_public(self, profile_id: ProfileId) -> tuple[Profile, list[Pick]]:
        """Approved profile plus its featured published picks. Anything else is 404."""
        profile = await load_public_profile(self.db, profile_id)
        return profile, await load_published_picks(self.db, profile_id)

    async def update_details(self, profile_id: ProfileId, changes: dict) -> Profile:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise DomainValidationError(
                f"Fields not editable: {', '.join(sorted(unknown))}",
                sorted(unknown)[0],
            )
        try:
            async with atomic(self.db):
                profile = await load_profile(self.db, profile_id)
                ensure_active(profile)
                for name, value in changes.items():
                    setattr(profile, name, value)
                profile.updated_at = self.clock.now()
                await self.db.flush()
        except IntegrityError:
            raise DomainValidationError("Username already taken", "username")
        return await load_profile(self.db, profile_id)

    async def gate_status(self, profile_id: ProfileId) -> dict:
        """Read-only: would submit() pass right now, and if not, why."""
        profile = await load_profile(self.db, profile_id)
        picks = await load_picks(self.db, profile_id)
        transition_error = check_profile_transition(profile.status, LifecycleAction.SUBMIT)
        gate_error = validate_submission(profile, picks)
        return {
            "profile_status": profile.status,
            "can_submit": transition_error is None and gate_error is None,
            "transition_error": transition_error,
            "gate_error": gate_error,
            "rejection_note": profile.rejection_note,
        }

    # ─── Transitions ────────────────────────────────────────────

    async def submit(self, profile_id: ProfileId) -> TransitionResult:
        """draft|rejected|unpublished -> pending, picks -> pending_review, new live review."""
        async with atomic(self.db):
            profile = await load_profile(self.db, profile_id)
            ensure_active(profile)
            ctx = profile_context(profile_id)
            error = check_profile_transition(profile.status, LifecycleAction.SUBMIT)
            if error:
                raise InvalidTransitionError(error, ctx)

            picks = await load_picks(self.db, profile_id)
            gate_error = validate_submission(profile, picks)
            if gate_error:
                logger.warning(
                    f"Submit refused: {gate_error['message']}",
                    extra={"profile_id": profile_id, "error_code": gate_error["error_code"]},
                )
                raise GateRejectedError(gate_error, ctx)

            now = self.clock.now()
            from_status = profile.status
            await swap_profile_status(
                self.db, profile, LifecycleAction.SUBMIT, now,
                last_submitted_at=now, rejection_note=None,
            )
            moved = await move_picks(self.db, profile_id, LifecycleAction.SUBMIT)
            review = SubmissionReview(
                profile_id=profile_id,
                status=ReviewStatus.PENDING.value,
                submitted_at=now,
            )
            self.db.add(review)
            try:
                await self.db.flush()
            except IntegrityError:
                raise StaleStateError(
                    "A submission for this profile is already awaiting review.", ctx,
                )

        logger.info(
            "Profile submitted for review",
            extra={
                "profile_id": profile_id, "review_id": review.id,
                "from_status": from_status, "to_status": "pending",
                "picks_moved": moved,
            },
        )
        return TransitionResult(
            await load_profile(self.db, profile_id), review, moved,
        )

    async def cancel_submission(self, profile_id: ProfileId) -> TransitionResult:
        """pending -> draft, live review -> canceled, pending_review picks -> draft."""
        async with atomic(self.db):
            profile = await load_profile(self.db, profile_id)
            review = await load_live_review(self.db, profile_id)
            if review is None:
                logger.info(
                    "Cancel requested without a live review (no-op)",
                    extra={"profile_id": profile_id},
                )
                return TransitionResult(profile, None, 0, changed=False)
            moved = await self._apply_cancel(profile, review)

        logger.info(
            "Submission canceled",
            extra={
                "profile_id": profile_id, "review_id": review.id,
                "from_status": "pending", "to_status": "draft", "picks_moved": moved,
            },
        )
        await self.db.refresh(review)
        return TransitionResult(await load_profile(self.db, profile_id), review, moved)

    async def unpublish(self, profile_id: ProfileId, confirm: bool = True) -> TransitionResult:
        """approved -> unpublished, published picks -> draft. Explicit call only."""
        if not confirm:
            raise DomainValidationError("Unpublishing must be confirmed", "confirm")
        async with atomic(self.db):
            profile = await load_profile(self.db, profile_id)
            ensure_active(profile)
            moved = await self._apply_unpublish(profile)

        logger.info(
            "Profile unpublished",
            extra={
                "profile_id": profile_id, "from_status": "approved",
                "to_status": "unpublished", "picks_moved": moved,
            },
        )
        return TransitionResult(await load_profile(self.db, profile_id), None, moved)

    async def delete_account(self, profile_id: ProfileId) -> Profile:
        """Withdraw from public view, then anonymize. The row itself is kept."""
        async with atomic(self.db):
            profile = await load_profile(self.db, profile_id)
            if profile.deleted_at is not None:
                return profile
            if profile.status == ProfileStatus.APPROVED:
                await self._apply_unpublish(profile)
            else:
                review = await load_live_review(self.db, profile_id)
                if review is not None:
                    await self._apply_cancel(profile, review)
            profile = await load_profile(self.db, profile_id)
            now = self.clock.now()
            profile.full_name = None
            profile.username = None
            profile.email = None
            profile.bio = None
            profile.avatar_url = None
            profile.shelf_image_url = None
            profile.social_links = {}
            profile.updated_at = now
            profile.deleted_at = now

        logger.info("Account deleted (anonymized)", extra={"profile_id": profile_id})
        return await load_profile(self.db, profile_id)

    # ─── Shared steps (caller owns the transaction) ─────────────

    async def _apply_cancel(self, profile: Profile, review: SubmissionReview) -> int:
        error = check_profile_transition(profile.status, LifecycleAction.CANCEL)
        if error:
            raise InvalidTransitionError(error, profile_context(profile.id))
        now = self.clock.now()
        await swap_profile_status(self.db, profile, LifecycleAction.CANCEL, now)
        await close_review(self.db, review, LifecycleAction.CANCEL)
        return await move_picks(self.db, profile.id, LifecycleAction.CANCEL)

    async def _apply_unpublish(self, profile: Profile) -> int:
        error = check_profile_transition(profile.status, LifecycleAction.UNPUBLISH)
        if error:
            raise InvalidTransitionError(error, profile_context(profile.id))
        now = self.clock.now()
        await swap_profile_status(self.db, profile, LifecycleAction.UNPUBLISH, now)
        return await move_picks(self.db, profile.id, LifecycleAction.UNPUBLISH)
