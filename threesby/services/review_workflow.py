"""Review Workflow — administrator approve/reject of pending submissions.

Invariants:
    - Operates only on profiles with status 'pending' AND a live SubmissionReview
    - approve re-runs the approval gate on picks read inside its own transaction;
      a failing gate raises InsufficientPicksError before any write
    - approve is all-or-nothing: profile approved + pending_review picks published +
      review approved commit together, or nothing does
    - Profile and review writes are compare-and-swap on status='pending'; the loser of two
      concurrent admin actions gets StaleStateError, never a silent overwrite
    - reject leaves picks in pending_review (only 'published' is public)

Design Decisions:
    - expected_review_id lets the dashboard say "I am acting on review X": if X is no longer
      live, someone else already decided and the caller gets StaleStateError
    - flagged_pick_ids on reject mark individual picks 'rejected' so the curator knows what to fix
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from threesby.core.boundary_protocols import Clock
from threesby.core.domain_types import PickId, PickStatus, ProfileId, ReviewId, ReviewStatus
from threesby.core.errors import (
    DomainValidationError, InsufficientPicksError, InvalidTransitionError,
    PermissionDeniedError, StaleStateError,
)
from threesby.core.publication_gate import can_approve
from threesby.core.transitions import LifecycleAction, check_profile_transition
from threesby.models.pick import Pick
from threesby.models.profile import Profile
from threesby.models.submission_review import SubmissionReview
from threesby.services.curator_lifecycle import TransitionResult
from threesby.services.records import (
    close_review, load_live_review, load_picks, load_profile, move_picks,
    profile_context, swap_profile_status,
)
from threesby.services.transaction import atomic

logger = logging.getLogger(__name__)


class ReviewWorkflow:
    """Admin-side transitions for submitted profiles."""

    def __init__(self, db: AsyncSession, clock: Clock):
        self.db = db
        self.clock = clock

    async def approve(
        self, profile_id: ProfileId, reviewer_id: ProfileId,
        expected_review_id: ReviewId | None = None,
    ) -> TransitionResult:
        """pending -> approved, pending_review picks -> published, review -> approved."""
        async with atomic(self.db):
            await self._require_reviewer(reviewer_id)
            profile, review = await self._load_reviewable(
                profile_id, LifecycleAction.APPROVE, expected_review_id,
            )
            picks = await load_picks(self.db, profile_id)
            gate_error = can_approve(profile, picks)
            if gate_error:
                logger.warning(
                    f"Approve refused: {gate_error['message']}",
                    extra={
                        "profile_id": profile_id, "review_id": review.id,
                        "reviewer_id": reviewer_id, "error_code": "INSUFFICIENT_PICKS",
                    },
                )
                raise InsufficientPicksError(
                    gate_error, profile_context(profile_id, review_id=str(review.id)),
                )

            now = self.clock.now()
            await swap_profile_status(
                self.db, profile, LifecycleAction.APPROVE, now, rejection_note=None,
            )
            await close_review(
                self.db, review, LifecycleAction.APPROVE,
                reviewed_by=reviewer_id, reviewed_at=now,
            )
            moved = await move_picks(self.db, profile_id, LifecycleAction.APPROVE)

        logger.info(
            "Submission approved",
            extra={
                "profile_id": profile_id, "review_id": review.id,
                "reviewer_id": reviewer_id, "from_status": "pending",
                "to_status": "approved", "picks_moved": moved,
            },
        )
        await self.db.refresh(review)
        return TransitionResult(await load_profile(self.db, profile_id), review, moved)

    async def reject(
        self, profile_id: ProfileId, reviewer_id: ProfileId, note: str,
        flagged_pick_ids: list[PickId] | None = None,
        expected_review_id: ReviewId | None = None,
    ) -> TransitionResult:
        """pending -> rejected with note, review -> rejected. Picks stay pending_review."""
        note = (note or "").strip()
        if not note:
            raise DomainValidationError("A rejection note is required", "note")
        flagged = list(dict.fromkeys(flagged_pick_ids or []))

        async with atomic(self.db):
            await self._require_reviewer(reviewer_id)
            profile, review = await self._load_reviewable(
                profile_id, LifecycleAction.REJECT, expected_review_id,
            )
            if flagged:
                await self._check_flaggable(profile_id, flagged)

            now = self.clock.now()
            await swap_profile_status(
                self.db, profile, LifecycleAction.REJECT, now, rejection_note=note,
            )
            await close_review(
                self.db, review, LifecycleAction.REJECT,
                reviewed_by=reviewer_id, reviewed_at=now, rejection_note=note,
            )
            flagged_count = 0
            if flagged:
                flagged_count = await move_picks(
                    self.db, profile_id, LifecycleAction.FLAG_PICK, only_ids=flagged,
                )

        logger.info(
            "Submission rejected",
            extra={
                "profile_id": profile_id, "review_id": review.id,
                "reviewer_id": reviewer_id, "from_status": "pending",
                "to_status": "rejected", "picks_moved": flagged_count,
            },
        )
        await self.db.refresh(review)
        return TransitionResult(
            await load_profile(self.db, profile_id), review, flagged_count,
        )

    async def list_pending(self) -> list[dict]:
        """Review queue, oldest submission first, with per-status pick counts."""
        result = await self.db.execute(
            select(SubmissionReview, Profile)
            .join(Profile, Profile.id == SubmissionReview.profile_id)
            .where(SubmissionReview.status == ReviewStatus.PENDING.value)
            .order_by(SubmissionReview.submitted_at.asc())
            .execution_options(populate_existing=True),
        )
        rows = result.all()
        counts = await self._pick_counts([profile.id for _, profile in rows])
        return [
            {
                "review": review,
                "profile": profile,
                "pick_counts": counts.get(profile.id, {}),
            }
            for review, profile in rows
        ]

    async def review_history(self, profile_id: ProfileId) -> list[SubmissionReview]:
        await load_profile(self.db, profile_id)
        result = await self.db.execute(
            select(SubmissionReview)
            .where(SubmissionReview.profile_id == profile_id)
            .order_by(SubmissionReview.submitted_at.desc())
            .execution_options(populate_existing=True),
        )
        return list(result.scalars().all())

    # ─── Helpers ────────────────────────────────────────────────

    async def _require_reviewer(self, reviewer_id: ProfileId) -> None:
        reviewer = await load_profile(self.db, reviewer_id)
        if not reviewer.is_admin or reviewer.deleted_at is not None:
            raise PermissionDeniedError("Only administrators can review submissions")

    async def _load_reviewable(
        self, profile_id: ProfileId, action: LifecycleAction,
        expected_review_id: ReviewId | None,
    ) -> tuple[Profile, SubmissionReview]:
        profile = await load_profile(self.db, profile_id)
        review = await load_live_review(self.db, profile_id)
        ctx = profile_context(profile_id)
        if expected_review_id is not None and (
            review is None or review.id != expected_review_id
        ):
            raise StaleStateError(
                "This submission was already handled by someone else.",
                profile_context(profile_id, review_id=str(expected_review_id)),
            )
        error = check_profile_transition(profile.status, action)
        if error:
            raise InvalidTransitionError(error, ctx)
        if review is None:
            raise InvalidTransitionError(
                {
                    "status": "error",
                    "error_code": "NO_LIVE_REVIEW",
                    "message": "This profile has no submission awaiting review",
                },
                ctx,
            )
        return profile, review

    async def _check_flaggable(self, profile_id: ProfileId, pick_ids: list[PickId]) -> None:
        picks = {p.id: p for p in await load_picks(self.db, profile_id)}
        for pick_id in pick_ids:
            pick = picks.get(pick_id)
            if pick is None or pick.status != PickStatus.PENDING_REVIEW:
                raise DomainValidationError(
                    f"Pick '{pick_id}' is not part of this submission",
                    "flagged_pick_ids",
                )

    async def _pick_counts(self, profile_ids: list[ProfileId]) -> dict[ProfileId, dict[str, int]]:
        if not profile_ids:
            return {}
        result = await self.db.execute(
            select(Pick.profile_id, Pick.status, func.count())
            .where(Pick.profile_id.in_(profile_ids))
            .group_by(Pick.profile_id, Pick.status),
        )
        counts: dict[ProfileId, dict[str, int]] = {}
        for profile_id, status, count in result.all():
            counts.setdefault(profile_id, {})[status] = count
        return counts
