"""Error Hierarchy — typed, categorized exceptions for all Threesby failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are recoverable by the caller; infrastructure errors (5xx) are critical
    - to_response() produces the REST error envelope
    - No internal details leaked in user-facing messages
    - The core never retries: every error surfaces to the caller unchanged

Design Decisions:
    - Single hierarchy with ThreesbyError base: FastAPI global handler catches all (uniform error shape)
    - ErrorContext as dataclass: identifiers for observability without coupling to logging
    - Gate errors carry the pure gate result dict so the UI can show which requirement is unmet
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    PERMISSION = "permission"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Identifiers attached to an error for logs and responses."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    profile_id: str | None = None
    pick_id: str | None = None
    review_id: str | None = None
    invite_code: str | None = None
    debug_info: dict[str, Any] | None = None


class ThreesbyError(Exception):
    """Base exception for all Threesby errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.details = details or {}

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "details": self.details,
                "context": {
                    "profile_id": self.context.profile_id,
                    "pick_id": self.context.pick_id,
                    "review_id": self.context.review_id,
                    "invite_code": self.context.invite_code,
                },
            }
        }


# ─── Lifecycle Errors ───────────────────────────────────────────

class GateRejectedError(ThreesbyError):
    """Submit refused: content or profile incomplete, or nothing changed since rejection."""
    def __init__(self, gate_error: dict, context: ErrorContext | None = None):
        super().__init__(
            gate_error["message"], "GATE_REJECTED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 422, details=gate_error,
        )
        self.reason_code = gate_error["error_code"]


class InsufficientPicksError(ThreesbyError):
    """Approve refused: picks drifted below the per-category minimum since submit."""
    def __init__(self, gate_error: dict, context: ErrorContext | None = None):
        super().__init__(
            gate_error["message"], "INSUFFICIENT_PICKS", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 409, details=gate_error,
        )


class StaleStateError(ThreesbyError):
    """Lost a race: the record changed between read and conditional write."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "STALE_STATE", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class InvalidTransitionError(ThreesbyError):
    """Requested transition is not allowed from the current status."""
    def __init__(self, transition_error: dict, context: ErrorContext | None = None):
        super().__init__(
            transition_error["message"], "INVALID_TRANSITION",
            ErrorCategory.BUSINESS_RULE, ErrorSeverity.ERROR, context, 409,
            details=transition_error,
        )


class RankConflictError(ThreesbyError):
    """Another pick already occupies the (category, rank) slot."""
    def __init__(
        self, category: str, rank: int | None, context: ErrorContext | None = None,
    ):
        slot = f"Rank {rank}" if rank is not None else "A featured rank"
        super().__init__(
            f"{slot} in '{category}' is already taken",
            "RANK_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
            details={"category": category, "rank": rank},
        )


# ─── Invite Errors ──────────────────────────────────────────────

class CodeAlreadyUsedError(ThreesbyError):
    """Invite code was already redeemed."""
    def __init__(self, code: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.invite_code = code
        super().__init__(
            "This invitation code has already been used",
            "CODE_ALREADY_USED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )


class CodeExpiredError(ThreesbyError):
    """Invite code is past its expiry."""
    def __init__(self, code: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.invite_code = code
        super().__init__(
            "This invitation code has expired",
            "CODE_EXPIRED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 410,
        )


class InviteEmailMismatchError(ThreesbyError):
    """Invite code is bound to a different email address."""
    def __init__(self, code: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.invite_code = code
        super().__init__(
            "This invitation code was issued for a different email address",
            "INVITE_EMAIL_MISMATCH", ErrorCategory.PERMISSION,
            ErrorSeverity.ERROR, ctx, 403,
        )


class InviteQuotaExceededError(ThreesbyError):
    """Issuer already holds the maximum number of live codes."""
    def __init__(self, quota: int, context: ErrorContext | None = None):
        super().__init__(
            f"You already have {quota} active invitation codes",
            "INVITE_QUOTA_EXCEEDED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 429,
            details={"quota": quota},
        )


# ─── Generic Domain Errors ──────────────────────────────────────

class ResourceNotFoundError(ThreesbyError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class PermissionDeniedError(ThreesbyError):
    """Caller is not allowed to perform this operation."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "PERMISSION_DENIED", ErrorCategory.PERMISSION,
            ErrorSeverity.ERROR, context, 403,
        )


class DomainValidationError(ThreesbyError):
    """Input is well-formed but violates a domain rule."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400, details={"field": field},
        )
        self.field = field


# ─── Infrastructure Errors (5xx) ────────────────────────────────

class DatabaseError(ThreesbyError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class AccountProviderError(ThreesbyError):
    """External authentication service call failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Account service {operation} failed: {message}",
            "ACCOUNT_PROVIDER_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 502,
        )
        self.operation = operation
