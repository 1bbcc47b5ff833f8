"""Pick Routes — the caller's picks and a profile's public shelf."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from threesby.api.dependencies import get_actor, get_pick_store
from threesby.models.profile import Profile
from threesby.schemas.pick import PickCreate, PickReorder, PickResponse, PickUpdate
from threesby.services.pick_store import PickStore

router = APIRouter(prefix="/api/v1/picks", tags=["picks"])


@router.get("", response_model=list[PickResponse])
async def list_my_picks(
    actor: Profile = Depends(get_actor), picks: PickStore = Depends(get_pick_store),
):
    return await picks.list_for_profile(actor.id)


@router.post("", response_model=PickResponse, status_code=status.HTTP_201_CREATED)
async def create_pick(
    body: PickCreate,
    actor: Profile = Depends(get_actor),
    picks: PickStore = Depends(get_pick_store),
):
    return await picks.create(actor.id, body.model_dump(mode="json"))


@router.patch("/{pick_id}", response_model=PickResponse)
async def update_pick(
    pick_id: UUID,
    body: PickUpdate,
    actor: Profile = Depends(get_actor),
    picks: PickStore = Depends(get_pick_store),
):
    return await picks.update(
        actor.id, pick_id, body.model_dump(mode="json", exclude_unset=True),
    )


@router.delete("/{pick_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pick(
    pick_id: UUID,
    actor: Profile = Depends(get_actor),
    picks: PickStore = Depends(get_pick_store),
):
    await picks.delete(actor.id, pick_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/reorder", response_model=list[PickResponse])
async def reorder_picks(
    body: PickReorder,
    actor: Profile = Depends(get_actor),
    picks: PickStore = Depends(get_pick_store),
):
    return await picks.reorder(actor.id, body.category.value, body.pick_ids)


@router.get("/public/{profile_id}", response_model=list[PickResponse])
async def list_public_picks(
    profile_id: UUID, picks: PickStore = Depends(get_pick_store),
):
    """Published featured picks of an approved profile."""
    return await picks.list_published(profile_id)
