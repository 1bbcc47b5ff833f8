"""Lifecycle Transitions — the single transition table for profiles, picks and reviews.

Invariants:
    - All functions are PURE: no IO, no DB
    - Every status write in services/ looks its source and target states up here
    - Profiles have no terminal state; reviews leave PENDING exactly once
    - Pick transitions only touch picks whose current status is a listed source

Design Decisions:
    - One table per entity instead of string comparisons at call sites
    - Return error dict (not raise) on illegal profile transitions, like the gate checks;
      services wrap it in InvalidTransitionError
"""

from enum import Enum

from threesby.core.domain_types import (
    PickStatus, ProfileStatus, ReviewStatus, status_value,
)


class LifecycleAction(str, Enum):
    """Operations that move a profile (and its picks) between states."""
    SUBMIT = "submit"
    CANCEL = "cancel_submission"
    UNPUBLISH = "unpublish"
    APPROVE = "approve"
    REJECT = "reject"
    FLAG_PICK = "flag_pick"


# action -> (allowed source statuses, target status)
PROFILE_TRANSITIONS: dict[LifecycleAction, tuple[tuple[ProfileStatus, ...], ProfileStatus]] = {
    LifecycleAction.SUBMIT: (
        (ProfileStatus.DRAFT, ProfileStatus.REJECTED, ProfileStatus.UNPUBLISHED),
        ProfileStatus.PENDING,
    ),
    LifecycleAction.CANCEL: ((ProfileStatus.PENDING,), ProfileStatus.DRAFT),
    LifecycleAction.UNPUBLISH: ((ProfileStatus.APPROVED,), ProfileStatus.UNPUBLISHED),
    LifecycleAction.APPROVE: ((ProfileStatus.PENDING,), ProfileStatus.APPROVED),
    LifecycleAction.REJECT: ((ProfileStatus.PENDING,), ProfileStatus.REJECTED),
}

# action -> (pick statuses moved, target pick status). REJECT leaves picks as submitted.
PICK_TRANSITIONS: dict[LifecycleAction, tuple[tuple[PickStatus, ...], PickStatus]] = {
    LifecycleAction.SUBMIT: (
        (PickStatus.DRAFT, PickStatus.PENDING_REVIEW), PickStatus.PENDING_REVIEW,
    ),
    LifecycleAction.CANCEL: ((PickStatus.PENDING_REVIEW,), PickStatus.DRAFT),
    LifecycleAction.UNPUBLISH: ((PickStatus.PUBLISHED,), PickStatus.DRAFT),
    LifecycleAction.APPROVE: ((PickStatus.PENDING_REVIEW,), PickStatus.PUBLISHED),
    LifecycleAction.FLAG_PICK: ((PickStatus.PENDING_REVIEW,), PickStatus.REJECTED),
}

# action -> terminal review status (source is always PENDING)
REVIEW_TRANSITIONS: dict[LifecycleAction, ReviewStatus] = {
    LifecycleAction.CANCEL: ReviewStatus.CANCELED,
    LifecycleAction.APPROVE: ReviewStatus.APPROVED,
    LifecycleAction.REJECT: ReviewStatus.REJECTED,
}


def check_profile_transition(current: str, action: LifecycleAction) -> dict | None:
    """Error dict if `action` is not allowed from `current`, else None."""
    sources, _ = PROFILE_TRANSITIONS[action]
    if status_value(current) in {s.value for s in sources}:
        return None
    return {
        "status": "error",
        "error_code": "INVALID_TRANSITION",
        "message": (
            f"Cannot {action.value.replace('_', ' ')} a profile that is "
            f"'{status_value(current)}'"
        ),
        "action": action.value,
        "current_status": status_value(current),
        "allowed_from": [s.value for s in sources],
    }


def profile_target(action: LifecycleAction) -> ProfileStatus:
    return PROFILE_TRANSITIONS[action][1]


def pick_sources(action: LifecycleAction) -> list[str]:
    """Pick status values moved by `action` (empty when picks are untouched)."""
    if action not in PICK_TRANSITIONS:
        return []
    return [s.value for s in PICK_TRANSITIONS[action][0]]


def pick_target(action: LifecycleAction) -> PickStatus | None:
    if action not in PICK_TRANSITIONS:
        return None
    return PICK_TRANSITIONS[action][1]


def review_target(action: LifecycleAction) -> ReviewStatus:
    return REVIEW_TRANSITIONS[action]


def pick_status_after_edit(current: str) -> str:
    """A flagged (rejected) pick returns to draft once its owner edits it."""
    if status_value(current) == PickStatus.REJECTED.value:
        return PickStatus.DRAFT.value
    return status_value(current)
