"""Collection Routes — the caller's themed issues."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from threesby.api.dependencies import get_actor, get_collection_store
from threesby.models.profile import Profile
from threesby.schemas.collection import (
    CollectionCreate, CollectionResponse, CollectionUpdate,
)
from threesby.services.collection_store import CollectionStore

router = APIRouter(prefix="/api/v1/collections", tags=["collections"])


@router.get("", response_model=list[CollectionResponse])
async def list_my_collections(
    actor: Profile = Depends(get_actor),
    collections: CollectionStore = Depends(get_collection_store),
):
    return await collections.list_for_profile(actor.id)


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
async def create_collection(
    body: CollectionCreate,
    actor: Profile = Depends(get_actor),
    collections: CollectionStore = Depends(get_collection_store),
):
    return await collections.create(actor.id, body.model_dump(mode="json"))


@router.patch("/{collection_id}", response_model=CollectionResponse)
async def update_collection(
    collection_id: UUID,
    body: CollectionUpdate,
    actor: Profile = Depends(get_actor),
    collections: CollectionStore = Depends(get_collection_store),
):
    return await collections.update(
        actor.id, collection_id, body.model_dump(mode="json", exclude_unset=True),
    )


@router.delete("/{collection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_collection(
    collection_id: UUID,
    actor: Profile = Depends(get_actor),
    collections: CollectionStore = Depends(get_collection_store),
):
    await collections.delete(actor.id, collection_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
