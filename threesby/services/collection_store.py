"""Collection Store — themed issues grouping a curator's own picks.

Invariants:
    - Every pick id in a collection belongs to the collection owner
    - issue_number = max(existing) + 1 per profile, starting at 1
    - pick_ids stored as strings (JSON column), order preserved, duplicates dropped
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from threesby.core.boundary_protocols import Clock
from threesby.core.domain_types import Category, CollectionId, FontColor, ProfileId
from threesby.core.errors import (
    DomainValidationError, ResourceNotFoundError, StaleStateError,
)
from threesby.models.collection import Collection
from threesby.services.curator_lifecycle import ensure_active
from threesby.services.records import load_picks, load_profile, profile_context
from threesby.services.transaction import atomic

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({
    "title", "description", "categories", "pick_ids", "cover_image_url", "font_color",
})


class CollectionStore:

    def __init__(self, db: AsyncSession, clock: Clock):
        self.db = db
        self.clock = clock

    async def list_for_profile(self, profile_id: ProfileId) -> list[Collection]:
        await load_profile(self.db, profile_id)
        result = await self.db.execute(
            select(Collection)
            .where(Collection.profile_id == profile_id)
            .order_by(Collection.issue_number.asc()),
        )
        return list(result.scalars().all())

    async def create(self, profile_id: ProfileId, data: dict) -> Collection:
        fields = self._checked_fields(data)
        if not fields.get("title"):
            raise DomainValidationError("'title' is required", "title")

        async with atomic(self.db):
            profile = await load_profile(self.db, profile_id)
            ensure_active(profile)
            await self._check_owned_picks(profile_id, fields.get("pick_ids", []))
            now = self.clock.now()
            collection = Collection(
                profile_id=profile_id,
                issue_number=await self._next_issue(profile_id),
                created_at=now, updated_at=now,
                **fields,
            )
            self.db.add(collection)
            try:
                await self.db.flush()
            except IntegrityError:
                raise StaleStateError(
                    "Another collection was created at the same time. Try again.",
                    profile_context(profile_id),
                )

        logger.info(
            f"Collection #{collection.issue_number} created",
            extra={"profile_id": profile_id},
        )
        return await self._load(profile_id, collection.id)

    async def update(self, profile_id: ProfileId, collection_id: CollectionId, changes: dict) -> Collection:
        fields = self._checked_fields(changes)
        if "title" in fields and not fields["title"]:
            raise DomainValidationError("'title' must not be empty", "title")

        async with atomic(self.db):
            profile = await load_profile(self.db, profile_id)
            ensure_active(profile)
            collection = await self._load(profile_id, collection_id)
            if "pick_ids" in fields:
                await self._check_owned_picks(profile_id, fields["pick_ids"])
            for name, value in fields.items():
                setattr(collection, name, value)
            collection.updated_at = self.clock.now()

        logger.info("Collection updated", extra={"profile_id": profile_id})
        return await self._load(profile_id, collection_id)

    async def delete(self, profile_id: ProfileId, collection_id: CollectionId) -> None:
        async with atomic(self.db):
            collection = await self._load(profile_id, collection_id)
            await self.db.delete(collection)
        logger.info("Collection deleted", extra={"profile_id": profile_id})

    # ─── Helpers ────────────────────────────────────────────────

    def _checked_fields(self, data: dict) -> dict:
        unknown = set(data) - EDITABLE_FIELDS
        if unknown:
            raise DomainValidationError(
                f"Fields not editable: {', '.join(sorted(unknown))}", sorted(unknown)[0],
            )
        fields = dict(data)
        if "title" in fields:
            fields["title"] = (fields["title"] or "").strip()
        if "categories" in fields:
            allowed = {c.value for c in Category}
            bad = [c for c in fields["categories"] if c not in allowed]
            if bad:
                raise DomainValidationError(f"Unknown category '{bad[0]}'", "categories")
            fields["categories"] = list(dict.fromkeys(fields["categories"]))
        if "font_color" in fields and fields["font_color"] not in {f.value for f in FontColor}:
            raise DomainValidationError(
                f"Unknown font color '{fields['font_color']}'", "font_color",
            )
        if "pick_ids" in fields:
            fields["pick_ids"] = list(dict.fromkeys(str(p) for p in fields["pick_ids"]))
        return fields

    async def _check_owned_picks(self, profile_id: ProfileId, pick_ids: list[str]) -> None:
        owned = {str(p.id) for p in await load_picks(self.db, profile_id)}
        for pick_id in pick_ids:
            if pick_id not in owned:
                raise DomainValidationError(
                    f"Pick '{pick_id}' does not belong to this curator", "pick_ids",
                    profile_context(profile_id, pick_id=pick_id),
                )

    async def _next_issue(self, profile_id: ProfileId) -> int:
        result = await self.db.execute(
            select(func.max(Collection.issue_number))
            .where(Collection.profile_id == profile_id),
        )
        return (result.scalar_one_or_none() or 0) + 1

    async def _load(self, profile_id: ProfileId, collection_id: CollectionId) -> Collection:
        result = await self.db.execute(
            select(Collection)
            .where(Collection.id == collection_id, Collection.profile_id == profile_id)
            .execution_options(populate_existing=True),
        )
        collection = result.scalar_one_or_none()
        if collection is None:
            raise ResourceNotFoundError("Collection", str(collection_id))
        return collection
