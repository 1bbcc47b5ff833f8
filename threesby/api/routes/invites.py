"""Invite Routes — issuing codes, checking them, and signing up with one.

Invariants:
    - validate and signup are unauthenticated (the caller has no account yet)
    - issue and list act on the caller's own codes; expire-stale is admin only
"""

from fastapi import APIRouter, Depends, status

from threesby.api.dependencies import (
    get_account_provider, get_actor, get_invite_registry, require_admin,
)
from threesby.core.boundary_protocols import AccountProvider
from threesby.models.profile import Profile
from threesby.schemas.invite import (
    InviteIssueRequest, InviteResponse, InviteValidateRequest, InviteValidation,
    IssuedInviteItem, SignupRequest,
)
from threesby.schemas.profile import ProfileResponse
from threesby.services.invite_registry import InviteRegistry

router = APIRouter(prefix="/api/v1/invites", tags=["invites"])


@router.post("", response_model=InviteResponse, status_code=status.HTTP_201_CREATED)
async def issue_invite(
    body: InviteIssueRequest | None = None,
    actor: Profile = Depends(get_actor),
    invites: InviteRegistry = Depends(get_invite_registry),
):
    return await invites.issue(actor.id, body.email if body else None)


@router.get("/mine", response_model=list[IssuedInviteItem])
async def list_my_invites(
    actor: Profile = Depends(get_actor),
    invites: InviteRegistry = Depends(get_invite_registry),
):
    return [
        IssuedInviteItem(
            invite=InviteResponse.model_validate(item["invite"]),
            effective_status=item["effective_status"].value,
        )
        for item in await invites.list_for_issuer(actor.id)
    ]


@router.post("/validate", response_model=InviteValidation)
async def validate_invite(
    body: InviteValidateRequest,
    invites: InviteRegistry = Depends(get_invite_registry),
):
    return await invites.validate(body.code)


@router.post(
    "/signup", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED,
)
async def signup_with_invite(
    body: SignupRequest,
    invites: InviteRegistry = Depends(get_invite_registry),
    accounts: AccountProvider = Depends(get_account_provider),
):
    return await invites.signup_with_invite(
        body.code, body.email, body.password, accounts,
        full_name=body.full_name, username=body.username,
    )


@router.post("/expire-stale")
async def expire_stale_invites(
    admin: Profile = Depends(require_admin),
    invites: InviteRegistry = Depends(get_invite_registry),
):
    return {"expired": await invites.expire_stale()}
