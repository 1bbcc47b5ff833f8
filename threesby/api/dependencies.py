"""API Dependencies — injectable collaborators and caller identity for routes.

Invariants:
    - Caller identity comes from the X-User-Id header set by the upstream auth gateway;
      a missing or malformed header is 401, never an anonymous write
    - Admin routes re-check profiles.is_admin on every request (no cached role)
    - Clock, code generator and account provider are overridable via app.dependency_overrides

Design Decisions:
    - Services built per request from the request's session: no shared mutable state
"""

from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from threesby.config import get_settings
from threesby.core.boundary_protocols import AccountProvider, Clock, CodeGenerator
from threesby.core.domain_types import ProfileId
from threesby.core.errors import PermissionDeniedError
from threesby.infrastructure.auth_client import HostedAuthAccountProvider
from threesby.infrastructure.clock import SystemClock
from threesby.infrastructure.codes import SecretsCodeGenerator
from threesby.infrastructure.database import get_db
from threesby.models.profile import Profile
from threesby.services.collection_store import CollectionStore
from threesby.services.curator_lifecycle import CuratorLifecycle, ensure_active
from threesby.services.invite_registry import InviteRegistry
from threesby.services.pick_store import PickStore
from threesby.services.review_workflow import ReviewWorkflow


def get_clock() -> Clock:
    return SystemClock()


def get_code_generator() -> CodeGenerator:
    return SecretsCodeGenerator(get_settings().invite_code_length)


def get_account_provider() -> AccountProvider:
    settings = get_settings()
    return HostedAuthAccountProvider(
        settings.auth_service_url,
        settings.auth_service_key,
        settings.auth_timeout_seconds,
    )


def get_lifecycle(
    db: AsyncSession = Depends(get_db), clock: Clock = Depends(get_clock),
) -> CuratorLifecycle:
    return CuratorLifecycle(db, clock)


def get_review_workflow(
    db: AsyncSession = Depends(get_db), clock: Clock = Depends(get_clock),
) -> ReviewWorkflow:
    return ReviewWorkflow(db, clock)


def get_invite_registry(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    codes: CodeGenerator = Depends(get_code_generator),
) -> InviteRegistry:
    settings = get_settings()
    return InviteRegistry(
        db, clock, codes,
        quota=settings.invite_quota, ttl_days=settings.invite_ttl_days,
    )


def get_pick_store(
    db: AsyncSession = Depends(get_db), clock: Clock = Depends(get_clock),
) -> PickStore:
    return PickStore(db, clock)


def get_collection_store(
    db: AsyncSession = Depends(get_db), clock: Clock = Depends(get_clock),
) -> CollectionStore:
    return CollectionStore(db, clock)


def get_actor_id(x_user_id: str | None = Header(None)) -> ProfileId:
    """Authenticated account id forwarded by the auth gateway."""
    if not x_user_id:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id")
    try:
        return ProfileId(UUID(x_user_id))
    except ValueError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Malformed X-User-Id")


async def get_actor(
    actor_id: ProfileId = Depends(get_actor_id),
    x_user_email: str | None = Header(None),
    lifecycle: CuratorLifecycle = Depends(get_lifecycle),
) -> Profile:
    """Caller's profile, created on first sight."""
    return await lifecycle.get_or_create(actor_id, x_user_email)


async def require_admin(actor: Profile = Depends(get_actor)) -> Profile:
    ensure_active(actor)
    if not actor.is_admin:
        raise PermissionDeniedError("Administrator access required")
    return actor
