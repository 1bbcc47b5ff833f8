"""Profile Routes — the caller's own profile and its lifecycle, plus public profile pages.

Invariants:
    - /me routes act only on the caller's profile (X-User-Id), never on a path id
    - Unpublish requires {"confirm": true} in the body
    - Public view 404s for anything not approved (no draft/pending leakage)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from threesby.api.dependencies import get_actor, get_actor_id, get_lifecycle
from threesby.core.domain_types import ProfileId
from threesby.models.profile import Profile
from threesby.schemas.pick import PickResponse
from threesby.schemas.profile import (
    GateStatusResponse, ProfileResponse, ProfileUpdate, PublicProfileResponse,
    TransitionResponse, UnpublishRequest,
)
from threesby.services.curator_lifecycle import CuratorLifecycle

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(actor: Profile = Depends(get_actor)):
    return actor


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    body: ProfileUpdate,
    actor: Profile = Depends(get_actor),
    lifecycle: CuratorLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.update_details(actor.id, body.model_dump(exclude_unset=True))


@router.get("/me/gate", response_model=GateStatusResponse)
async def get_my_gate_status(
    actor: Profile = Depends(get_actor),
    lifecycle: CuratorLifecycle = Depends(get_lifecycle),
):
    """Would submit succeed right now, and if not, which requirement is unmet."""
    return await lifecycle.gate_status(actor.id)


@router.post("/me/submit", response_model=TransitionResponse)
async def submit_my_profile(
    actor: Profile = Depends(get_actor),
    lifecycle: CuratorLifecycle = Depends(get_lifecycle),
):
    result = await lifecycle.submit(actor.id)
    return TransitionResponse.model_validate(result, from_attributes=True)


@router.post("/me/cancel")
async def cancel_my_submission(
    actor: Profile = Depends(get_actor),
    lifecycle: CuratorLifecycle = Depends(get_lifecycle),
):
    result = await lifecycle.cancel_submission(actor.id)
    return {
        "canceled": result.changed,
        "result": TransitionResponse.model_validate(result, from_attributes=True),
    }


@router.post("/me/unpublish", response_model=TransitionResponse)
async def unpublish_my_profile(
    body: UnpublishRequest,
    actor: Profile = Depends(get_actor),
    lifecycle: CuratorLifecycle = Depends(get_lifecycle),
):
    result = await lifecycle.unpublish(actor.id, confirm=body.confirm)
    return TransitionResponse.model_validate(result, from_attributes=True)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_account(
    actor_id: ProfileId = Depends(get_actor_id),
    lifecycle: CuratorLifecycle = Depends(get_lifecycle),
):
    """Anonymize the caller's profile. Idempotent."""
    await lifecycle.delete_account(actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{profile_id}/public", response_model=PublicProfileResponse)
async def get_public_profile(
    profile_id: UUID, lifecycle: CuratorLifecycle = Depends(get_lifecycle),
):
    profile, picks = await lifecycle.get_public(profile_id)
    return PublicProfileResponse(
        id=profile.id,
        username=profile.username,
        full_name=profile.full_name,
        title=profile.title,
        bio=profile.bio,
        location=profile.location,
        avatar_url=profile.avatar_url,
        shelf_image_url=profile.shelf_image_url,
        social_links=profile.social_links,
        picks=[PickResponse.model_validate(p) for p in picks],
    )
