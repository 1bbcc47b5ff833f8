"""Review Routes — administrator queue and approve/reject decisions.

Invariants:
    - Every route requires an active admin profile (require_admin)
    - Routes pass expected_review_id through so double-clicks and two admins surface as 409
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from threesby.api.dependencies import get_review_workflow, require_admin
from threesby.models.profile import Profile
from threesby.schemas.profile import TransitionResponse
from threesby.schemas.review import (
    ApproveRequest, PendingReviewItem, RejectRequest, ReviewResponse,
)
from threesby.services.review_workflow import ReviewWorkflow

router = APIRouter(prefix="/api/v1/reviews", tags=["reviews"])


@router.get("/pending", response_model=list[PendingReviewItem])
async def list_pending_reviews(
    admin: Profile = Depends(require_admin),
    reviews: ReviewWorkflow = Depends(get_review_workflow),
):
    return [
        PendingReviewItem(
            review=ReviewResponse.model_validate(item["review"]),
            profile_id=item["profile"].id,
            username=item["profile"].username,
            full_name=item["profile"].full_name,
            title=item["profile"].title,
            pick_counts=item["pick_counts"],
        )
        for item in await reviews.list_pending()
    ]


@router.get("/history/{profile_id}", response_model=list[ReviewResponse])
async def get_review_history(
    profile_id: UUID,
    admin: Profile = Depends(require_admin),
    reviews: ReviewWorkflow = Depends(get_review_workflow),
):
    return await reviews.review_history(profile_id)


@router.post("/{profile_id}/approve", response_model=TransitionResponse)
async def approve_submission(
    profile_id: UUID,
    body: ApproveRequest | None = None,
    admin: Profile = Depends(require_admin),
    reviews: ReviewWorkflow = Depends(get_review_workflow),
):
    result = await reviews.approve(
        profile_id, admin.id,
        expected_review_id=body.expected_review_id if body else None,
    )
    return TransitionResponse.model_validate(result, from_attributes=True)


@router.post("/{profile_id}/reject", response_model=TransitionResponse)
async def reject_submission(
    profile_id: UUID,
    body: RejectRequest,
    admin: Profile = Depends(require_admin),
    reviews: ReviewWorkflow = Depends(get_review_workflow),
):
    result = await reviews.reject(
        profile_id, admin.id, body.note,
        flagged_pick_ids=body.flagged_pick_ids,
        expected_review_id=body.expected_review_id,
    )
    return TransitionResponse.model_validate(result, from_attributes=True)
