"""Pick Store — create, edit, delete and reorder a curator's picks.

Invariants:
    - Content edits stamp updated_at (the resubmission gate reads it); status never set here
      except rejected -> draft when a flagged pick is edited
    - (profile, category, rank 1-3) is unique: checked on read for a friendly error, enforced by
      uq_picks_featured_slot; an IntegrityError on flush becomes RankConflictError
    - A published featured pick of an approved profile cannot leave ranks 1-3 of its category
    - Reorder is two-phase (clear ranks, flush, assign) so it never trips the unique index midway

Design Decisions:
    - Deleting a pick also removes it from the owner's collections
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from threesby.core.boundary_protocols import Clock
from threesby.core.domain_types import PickId, PickStatus, ProfileId
from threesby.core.errors import (
    DomainValidationError, InvalidTransitionError, RankConflictError,
)
from threesby.core.pick_rules import (
    check_category, check_featured_slot_delete, check_featured_slot_move,
    check_rank_available, plan_reorder,
)
from threesby.core.transitions import pick_status_after_edit
from threesby.models.collection import Collection
from threesby.models.pick import Pick
from threesby.services.curator_lifecycle import ensure_active
from threesby.services.records import (
    load_owned_pick, load_picks, load_profile, load_public_profile,
    load_published_picks, profile_context,
)
from threesby.services.transaction import atomic

logger = logging.getLogger(__name__)

CONTENT_FIELDS = frozenset({
    "title", "description", "image_url", "reference", "tags",
})
PLACEMENT_FIELDS = frozenset({"category", "rank"})


class PickStore:
    """Owner-side CRUD for picks."""

    def __init__(self, db: AsyncSession, clock: Clock):
        self.db = db
        self.clock = clock

    async def list_for_profile(self, profile_id: ProfileId) -> list[Pick]:
        await load_profile(self.db, profile_id)
        return await load_picks(self.db, profile_id)

    async def list_published(self, profile_id: ProfileId) -> list[Pick]:
        """Public view: published picks in ranks 1-3 of an approved profile."""
        await load_public_profile(self.db, profile_id)
        return await load_published_picks(self.db, profile_id)

    async def create(self, profile_id: ProfileId, data: dict) -> Pick:
        fields = self._checked_fields(data, required=("category", "title"))
        category, rank = fields["category"], fields.get("rank")
        ctx = profile_context(profile_id)

        async with atomic(self.db):
            profile = await load_profile(self.db, profile_id)
            ensure_active(profile)
            picks = await load_picks(self.db, profile_id)
            if check_rank_available(picks, category, rank):
                raise RankConflictError(category, rank, ctx)

            now = self.clock.now()
            pick = Pick(
                profile_id=profile_id,
                status=PickStatus.DRAFT.value,
                created_at=now, updated_at=now,
                **fields,
            )
            self.db.add(pick)
            await self._flush_slot(category, rank, ctx)

        logger.info(
            "Pick created",
            extra={"profile_id": profile_id, "pick_id": pick.id},
        )
        return await load_owned_pick(self.db, profile_id, pick.id)

    async def update(self, profile_id: ProfileId, pick_id: PickId, changes: dict) -> Pick:
        fields = self._checked_fields(changes)
        ctx = profile_context(profile_id, pick_id=str(pick_id))

        async with atomic(self.db):
            profile = await load_profile(self.db, profile_id)
            ensure_active(profile)
            pick = await load_owned_pick(self.db, profile_id, pick_id)
            new_category = fields.get("category", pick.category)
            new_rank = fields["rank"] if "rank" in fields else pick.rank

            if PLACEMENT_FIELDS & set(fields):
                error = check_featured_slot_move(
                    profile.status, pick, new_category, new_rank,
                )
                if error:
                    raise InvalidTransitionError(error, ctx)
                picks = await load_picks(self.db, profile_id)
                if check_rank_available(picks, new_category, new_rank, exclude_id=pick.id):
                    raise RankConflictError(new_category, new_rank, ctx)

            from_status = pick.status
            for name, value in fields.items():
                setattr(pick, name, value)
            pick.status = pick_status_after_edit(pick.status)
            pick.updated_at = self.clock.now()
            await self._flush_slot(new_category, new_rank, ctx)

        logger.info(
            "Pick updated",
            extra={
                "profile_id": profile_id, "pick_id": pick_id,
                "from_status": from_status, "to_status": pick.status,
            },
        )
        return await load_owned_pick(self.db, profile_id, pick_id)

    async def delete(self, profile_id: ProfileId, pick_id: PickId) -> None:
        ctx = profile_context(profile_id, pick_id=str(pick_id))
        async with atomic(self.db):
            profile = await load_profile(self.db, profile_id)
            ensure_active(profile)
            pick = await load_owned_pick(self.db, profile_id, pick_id)
            error = check_featured_slot_delete(profile.status, pick)
            if error:
                raise InvalidTransitionError(error, ctx)
            await self._prune_from_collections(profile_id, pick_id)
            await self.db.delete(pick)

        logger.info("Pick deleted", extra={"profile_id": profile_id, "pick_id": pick_id})

    async def reorder(
        self, profile_id: ProfileId, category: str, ordered_ids: list[PickId],
    ) -> list[Pick]:
        """Assign ranks 1..n to the category's picks in the given order."""
        if check_category(category):
            raise DomainValidationError(f"Unknown category '{category}'", "category")
        ctx = profile_context(profile_id)

        async with atomic(self.db):
            profile = await load_profile(self.db, profile_id)
            ensure_active(profile)
            category_picks = [
                p for p in await load_picks(self.db, profile_id) if p.category == category
            ]
            plan, error = plan_reorder(category_picks, ordered_ids, profile.status)
            if error:
                if error["error_code"] == "REORDER_MISMATCH":
                    raise DomainValidationError(error["message"], "pick_ids", ctx)
                raise InvalidTransitionError(error, ctx)

            by_id = {p.id: p for p in category_picks}
            previous = {p.id: p.rank for p in category_picks}
            for pick in category_picks:
                pick.rank = None
            await self.db.flush()

            now = self.clock.now()
            for pick_id, rank in plan.items():
                pick = by_id[pick_id]
                pick.rank = rank
                if previous[pick_id] != rank:
                    pick.updated_at = now
            await self._flush_slot(category, None, ctx)

        logger.info(
            f"Reordered {len(ordered_ids)} picks in '{category}'",
            extra={"profile_id": profile_id},
        )
        return [
            p for p in await load_picks(self.db, profile_id) if p.category == category
        ]

    # ─── Helpers ────────────────────────────────────────────────

    def _checked_fields(self, data: dict, required: tuple[str, ...] = ()) -> dict:
        unknown = set(data) - CONTENT_FIELDS - PLACEMENT_FIELDS
        if unknown:
            raise DomainValidationError(
                f"Fields not editable: {', '.join(sorted(unknown))}", sorted(unknown)[0],
            )
        for name in required:
            if not data.get(name):
                raise DomainValidationError(f"'{name}' is required", name)
        if "category" in data and check_category(data["category"]):
            raise DomainValidationError(
                f"Unknown category '{data['category']}'", "category",
            )
        if "title" in data and not (data["title"] or "").strip():
            raise DomainValidationError("'title' must not be empty", "title")
        rank = data.get("rank")
        if rank is not None and rank < 1:
            raise DomainValidationError("'rank' must be a positive integer", "rank")
        return dict(data)

    async def _flush_slot(self, category: str, rank: int | None, ctx) -> None:
        try:
            await self.db.flush()
        except IntegrityError:
            raise RankConflictError(category, rank, ctx)

    async def _prune_from_collections(self, profile_id: ProfileId, pick_id: PickId) -> None:
        result = await self.db.execute(
            select(Collection).where(Collection.profile_id == profile_id),
        )
        now = self.clock.now()
        for collection in result.scalars().all():
            if str(pick_id) in collection.pick_ids:
                collection.pick_ids = [p for p in collection.pick_ids if p != str(pick_id)]
                collection.updated_at = now
