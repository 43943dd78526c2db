"""
Admin API endpoints
Review moderation, rating reconciliation and profile-update staging
"""

from typing import List

from fastapi import APIRouter, Depends, status

from restaurant_reviews.core.logger import logger
from restaurant_reviews.dependencies.auth import require_admin
from restaurant_reviews.dependencies.services import (
    get_pending_update_cache,
    get_rating_service,
    get_review_service,
)
from restaurant_reviews.models.review import ReviewRecord
from restaurant_reviews.models.user import User
from restaurant_reviews.schemas.rating import ReconciliationReport
from restaurant_reviews.schemas.review import ReviewMutationResponse, ReviewResponse, ReviewUpdate
from restaurant_reviews.schemas.user import PendingUpdateCreate, PendingUpdateResponse
from restaurant_reviews.services.pending_updates import PendingUpdateCache
from restaurant_reviews.services.rating import RatingService
from restaurant_reviews.services.review import ReviewService

router = APIRouter()


@router.get("/reviews", response_model=List[ReviewResponse], summary="List All Reviews")
async def list_reviews(
    admin: User = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
):
    return await service.list_all_reviews()


@router.get("/reviews/{review_id}", response_model=ReviewRecord, summary="Get Review")
async def get_review(
    review_id: str,
    admin: User = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
):
    return await service.get_review(review_id)


@router.put("/reviews/{review_id}", response_model=ReviewMutationResponse, summary="Update Review")
async def update_review(
    review_id: str,
    payload: ReviewUpdate,
    admin: User = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
):
    review = await service.update_review(review_id, payload, updated_by=admin.id)
    return ReviewMutationResponse(message="Review updated successfully", review=review)


@router.delete("/reviews/{review_id}", response_model=ReviewMutationResponse, summary="Delete Review")
async def delete_review(
    review_id: str,
    admin: User = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
):
    await service.delete_review(review_id, deleted_by=admin.id)
    return ReviewMutationResponse(message="Review deleted successfully")


@router.post(
    "/restaurants/update-all-stats",
    response_model=ReconciliationReport,
    summary="Reconcile Restaurant Stats",
    description="Recompute average rating and review count for every restaurant",
)
async def update_all_restaurant_stats(
    admin: User = Depends(require_admin),
    rating_service: RatingService = Depends(get_rating_service),
):
    logger.info(
        "Admin requested restaurant stats reconciliation",
        user_id=admin.id,
        metadata={"event": "admin_reconciliation_request"}
    )
    return await rating_service.reconcile_all()


@router.post(
    "/users/{user_id}/pending-updates",
    response_model=PendingUpdateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Stage Profile Update Notification",
)
async def stage_pending_update(
    user_id: int,
    payload: PendingUpdateCreate,
    admin: User = Depends(require_admin),
    cache: PendingUpdateCache = Depends(get_pending_update_cache),
):
    entry = cache.store(user_id, payload.data)
    return PendingUpdateResponse(user_id=entry.user_id, data=entry.data, staged_at=entry.staged_at)
