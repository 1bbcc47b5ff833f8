"""Invite Registry — issue, validate and redeem single-use invitation codes.

Invariants:
    - A code goes pending -> completed at most once: redemption is one conditional UPDATE
      (WHERE status='pending' AND expires_at > now); rowcount 0 means someone else won
    - Expiry is read from expires_at and the injected clock, never from the stored status
    - Quota counting runs under a row lock on the issuer profile, so concurrent issues
      from the same curator serialize instead of both seeing "2 live codes"
    - signup_with_invite never leaves an external account without a profile: if the DB
      step fails, the account is deleted again and the code stays pending

Design Decisions:
    - Codes looked up normalized (strip + upper); stored upper-case at issue time
    - Collision on generation is retried a few times, then surfaced as StaleStateError
    - Compensation failure is logged at CRITICAL and the ORIGINAL error is re-raised
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from threesby.core.boundary_protocols import AccountProvider, Clock, CodeGenerator
from threesby.core.domain_types import InviteStatus, ProfileId, ProfileStatus
from threesby.core.errors import (
    CodeAlreadyUsedError, CodeExpiredError, DomainValidationError, ErrorContext,
    InviteEmailMismatchError, InviteQuotaExceededError, PermissionDeniedError,
    ResourceNotFoundError, StaleStateError,
)
from threesby.core.invite_rules import (
    check_bound_email, check_issuer, check_quota, effective_status,
    evaluate_invite, expiry_for, normalize_code,
)
from threesby.models.invite_code import InviteCode
from threesby.models.profile import Profile
from threesby.services.records import load_profile
from threesby.services.transaction import atomic

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5


class InviteRegistry:
    """Invitation codes: the only way in for new curators."""

    def __init__(
        self, db: AsyncSession, clock: Clock, codes: CodeGenerator,
        quota: int = 3, ttl_days: int = 30,
    ):
        self.db = db
        self.clock = clock
        self.codes = codes
        self.quota = quota
        self.ttl_days = ttl_days

    # ─── Issuing ────────────────────────────────────────────────

    async def issue(self, issuer_id: ProfileId, email: str | None = None) -> InviteCode:
        async with atomic(self.db):
            issuer = await load_profile(self.db, issuer_id, for_update=True)
            error = check_issuer(
                issuer.status, issuer.is_admin, issuer.deleted_at is not None,
            )
            if error:
                raise PermissionDeniedError(error["message"], ErrorContext(
                    profile_id=str(issuer_id),
                ))

            now = self.clock.now()
            live = await self._live_count(issuer_id, now)
            quota_error = check_quota(live, self.quota, issuer.is_admin)
            if quota_error:
                logger.warning(
                    "Invite refused: quota reached",
                    extra={"profile_id": issuer_id, "error_code": "INVITE_QUOTA_EXCEEDED"},
                )
                raise InviteQuotaExceededError(
                    self.quota, ErrorContext(profile_id=str(issuer_id)),
                )

            invite = InviteCode(
                code=await self._unused_code(),
                created_by=issuer_id,
                email=email.strip().lower() if email else None,
                status=InviteStatus.PENDING.value,
                expires_at=expiry_for(now, self.ttl_days),
                created_at=now,
            )
            self.db.add(invite)
            try:
                await self.db.flush()
            except IntegrityError:
                raise StaleStateError(
                    "Could not allocate a unique invitation code. Try again.",
                    ErrorContext(profile_id=str(issuer_id)),
                )

        logger.info(
            "Invite issued",
            extra={"profile_id": issuer_id, "invite_code": invite.code},
        )
        return invite

    async def list_for_issuer(self, issuer_id: ProfileId) -> list[dict]:
        """Issuer's codes, newest first, each with its live status."""
        now = self.clock.now()
        result = await self.db.execute(
            select(InviteCode)
            .where(InviteCode.created_by == issuer_id)
            .order_by(InviteCode.created_at.desc())
            .execution_options(populate_existing=True),
        )
        return [
            {
                "invite": invite,
                "effective_status": effective_status(invite.status, invite.expires_at, now),
            }
            for invite in result.scalars().all()
        ]

    async def expire_stale(self) -> int:
        """Refresh the cached status of pending codes past their expiry."""
        now = self.clock.now()
        async with atomic(self.db):
            result = await self.db.execute(
                update(InviteCode)
                .where(
                    InviteCode.status == InviteStatus.PENDING.value,
                    InviteCode.expires_at <= now,
                )
                .values(status=InviteStatus.EXPIRED.value)
                .execution_options(synchronize_session=False),
            )
            expired = result.rowcount
        logger.info(f"Expired {expired} stale invite codes")
        return expired

    # ─── Validation and redemption ──────────────────────────────

    async def validate(self, code: str) -> dict:
        invite = await self._find(code)
        if invite is None:
            return evaluate_invite(None, None, self.clock.now())
        return evaluate_invite(invite.status, invite.expires_at, self.clock.now())

    async def redeem(
        self, code: str, redeemer_email: str, redeemer_id: ProfileId | None = None,
    ) -> InviteCode:
        async with atomic(self.db):
            invite = await self._mark_completed(code, redeemer_email, redeemer_id)
        logger.info(
            "Invite redeemed",
            extra={"invite_code": invite.code, "profile_id": redeemer_id},
        )
        return invite

    async def signup_with_invite(
        self, code: str, email: str, password: str, accounts: AccountProvider,
        full_name: str | None = None, username: str | None = None,
    ) -> Profile:
        """Validate -> create external account -> profile + redeem in one transaction.

        The external account is created before the transaction because the profile
        id IS the account id. Any failure after that point deletes the account.
        """
        email = email.strip().lower()
        await self._check_redeemable(code, email)

        account_id = await accounts.create_account(email, password)
        logger.info(
            "External account created for signup",
            extra={"profile_id": account_id, "invite_code": normalize_code(code)},
        )
        try:
            async with atomic(self.db):
                now = self.clock.now()
                self.db.add(Profile(
                    id=account_id, email=email, username=username,
                    full_name=full_name, status=ProfileStatus.DRAFT.value,
                    invite_code=normalize_code(code),
                    created_at=now, updated_at=now,
                ))
                try:
                    await self.db.flush()
                except IntegrityError:
                    raise DomainValidationError("Username already taken", "username")
                await self._mark_completed(code, email, account_id)
        except BaseException as exc:
            await self._compensate(accounts, account_id, code, exc)
            raise

        logger.info(
            "Curator signed up with invite",
            extra={"profile_id": account_id, "invite_code": normalize_code(code)},
        )
        return await load_profile(self.db, account_id)

    # ─── Helpers ────────────────────────────────────────────────

    async def _find(self, code: str) -> InviteCode | None:
        result = await self.db.execute(
            select(InviteCode)
            .where(InviteCode.code == normalize_code(code))
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def _check_redeemable(self, code: str, email: str) -> InviteCode:
        """Raise the matching error unless `code` could be redeemed by `email` now."""
        normalized = normalize_code(code)
        invite = await self._find(normalized)
        if invite is None:
            raise ResourceNotFoundError("Invite code", normalized)
        verdict = evaluate_invite(invite.status, invite.expires_at, self.clock.now())
        if verdict["reason"] == "expired":
            raise CodeExpiredError(normalized)
        if verdict["reason"] == "already_used":
            raise CodeAlreadyUsedError(normalized)
        if check_bound_email(invite.email, email):
            logger.warning(
                "Invite redemption with a different email",
                extra={"invite_code": normalized, "error_code": "INVITE_EMAIL_MISMATCH"},
            )
            raise InviteEmailMismatchError(normalized)
        return invite

    async def _mark_completed(
        self, code: str, email: str, redeemer_id: ProfileId | None,
    ) -> InviteCode:
        """Conditional pending -> completed. Caller owns the transaction."""
        normalized = normalize_code(code)
        email = email.strip().lower()
        await self._check_redeemable(normalized, email)

        now = self.clock.now()
        result = await self.db.execute(
            update(InviteCode)
            .where(
                InviteCode.code == normalized,
                InviteCode.status == InviteStatus.PENDING.value,
                InviteCode.expires_at > now,
            )
            .values(
                status=InviteStatus.COMPLETED.value,
                used_by=redeemer_id, used_by_email=email, used_at=now,
            )
            .execution_options(synchronize_session=False),
        )
        if result.rowcount != 1:
            # Lost the race (or expired in between): re-read to report which.
            latest = await self._find(normalized)
            verdict = evaluate_invite(
                latest.status if latest else None,
                latest.expires_at if latest else None,
                now,
            )
            if verdict["reason"] == "expired":
                raise CodeExpiredError(normalized)
            raise CodeAlreadyUsedError(normalized)
        return await self._find(normalized)

    async def _compensate(
        self, accounts: AccountProvider, account_id: UUID, code: str,
        original: BaseException,
    ) -> None:
        logger.warning(
            f"Signup failed after account creation, removing account: {original}",
            extra={"profile_id": account_id, "invite_code": normalize_code(code)},
        )
        try:
            await accounts.delete_account(account_id)
        except Exception:
            logger.critical(
                "Compensation failed: external account left without a profile",
                exc_info=True,
                extra={"profile_id": account_id, "invite_code": normalize_code(code)},
            )

    async def _live_count(self, issuer_id: ProfileId, now: datetime) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(InviteCode)
            .where(
                InviteCode.created_by == issuer_id,
                InviteCode.status == InviteStatus.PENDING.value,
                InviteCode.expires_at > now,
            ),
        )
        return result.scalar_one()

    async def _unused_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            candidate = normalize_code(self.codes.generate())
            if await self._find(candidate) is None:
                return candidate
        raise StaleStateError("Could not allocate a unique invitation code. Try again.")
