"""Invite Rules — validity, expiry and issuing policy for invitation codes.

Invariants:
    - All functions are PURE: the current time is always passed in, never read
    - Expiry is computed from expires_at; the stored status is only a cache
    - COMPLETED is terminal and wins over expiry (a used code reports 'already_used')
    - Only approved curators (bounded quota) and admins may issue codes

Design Decisions:
    - Unambiguous alphabet (no 0/O, 1/I/L): codes are read aloud and typed by hand
    - Codes compared after strip + upper-case, matching how signup forms submit them
"""

from datetime import datetime, timedelta

from threesby.core.domain_types import InviteStatus, ProfileStatus, status_value
from threesby.core.timestamps import as_utc

CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"


def normalize_code(code: str) -> str:
    return code.strip().upper()


def expiry_for(issued_at: datetime, ttl_days: int) -> datetime:
    return as_utc(issued_at) + timedelta(days=ttl_days)


def effective_status(stored_status: str, expires_at: datetime, now: datetime) -> InviteStatus:
    """Live status: COMPLETED stays, anything else past expires_at is EXPIRED."""
    if status_value(stored_status) == InviteStatus.COMPLETED.value:
        return InviteStatus.COMPLETED
    if as_utc(now) >= as_utc(expires_at):
        return InviteStatus.EXPIRED
    return InviteStatus(status_value(stored_status))


def evaluate_invite(
    stored_status: str | None, expires_at: datetime | None, now: datetime,
) -> dict:
    """{'valid': bool, 'reason': str | None}. A missing code passes None for both fields."""
    if stored_status is None or expires_at is None:
        return {"valid": False, "reason": "not_found"}
    live = effective_status(stored_status, expires_at, now)
    if live == InviteStatus.COMPLETED:
        return {"valid": False, "reason": "already_used"}
    if live == InviteStatus.EXPIRED:
        return {"valid": False, "reason": "expired"}
    return {"valid": True, "reason": None}


def check_issuer(status: str, is_admin: bool, deleted: bool) -> dict | None:
    """Rule 1: only approved, non-deleted curators or admins may issue."""
    if deleted:
        return {
            "status": "error",
            "error_code": "ISSUER_NOT_ALLOWED",
            "message": "Deleted accounts cannot issue invitation codes",
        }
    if is_admin or status_value(status) == ProfileStatus.APPROVED.value:
        return None
    return {
        "status": "error",
        "error_code": "ISSUER_NOT_ALLOWED",
        "message": "Only published curators can invite new curators",
    }


def check_quota(live_count: int, quota: int, is_admin: bool) -> dict | None:
    """Rule 2: non-admin issuers hold at most `quota` live codes."""
    if is_admin or live_count < quota:
        return None
    return {
        "status": "error",
        "error_code": "INVITE_QUOTA_EXCEEDED",
        "message": f"You already have {quota} active invitation codes",
        "quota": quota,
    }


def check_bound_email(bound_email: str | None, email: str) -> dict | None:
    """Rule 3: a code issued for a specific email only redeems for that email."""
    if not bound_email or bound_email.strip().lower() == email.strip().lower():
        return None
    return {
        "status": "error",
        "error_code": "INVITE_EMAIL_MISMATCH",
        "message": "This invitation code was issued for a different email address",
    }
