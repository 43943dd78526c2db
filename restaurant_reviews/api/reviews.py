"""
Review API endpoints
Public restaurant review listings and rating stats, plus authenticated review actions
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from restaurant_reviews.core.logger import logger
from restaurant_reviews.dependencies.auth import get_current_user
from restaurant_reviews.dependencies.services import get_rating_service, get_review_service
from restaurant_reviews.models.review import ReviewRecord
from restaurant_reviews.models.user import User
from restaurant_reviews.schemas.review import (
    LikeToggleResponse,
    RatingStatsResponse,
    ReviewCreate,
    ReviewMutationResponse,
    ReviewResponse,
)
from restaurant_reviews.services.rating import RatingService
from restaurant_reviews.services.review import ReviewService

router = APIRouter()


def _parse_restaurant_id(raw: str) -> Optional[int]:
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid restaurant ID format: {raw}")
        return None


@router.get(
    "/restaurants/{restaurant_id}/reviews",
    response_model=List[ReviewResponse],
    summary="List Restaurant Reviews",
)
async def list_restaurant_reviews(
    restaurant_id: str,
    service: ReviewService = Depends(get_review_service),
):
    """Non-deleted reviews of a restaurant with author details"""
    parsed = _parse_restaurant_id(restaurant_id)
    if parsed is None:
        return []
    return await service.list_restaurant_reviews(parsed)


@router.get(
    "/restaurants/{restaurant_id}/rating",
    response_model=RatingStatsResponse,
    summary="Get Current Rating Stats",
    description="Rating stats computed live from reviews rather than the stored restaurant copy",
)
async def get_rating_stats(
    restaurant_id: str,
    rating_service: RatingService = Depends(get_rating_service),
):
    parsed = _parse_restaurant_id(restaurant_id)
    if parsed is None:
        return RatingStatsResponse(restaurant_id=restaurant_id, average_rating=0, review_count=0)

    snapshot = await rating_service.get_aggregate_snapshot(parsed)
    return RatingStatsResponse(
        restaurant_id=parsed,
        average_rating=snapshot.average_rating,
        review_count=snapshot.review_count,
    )


@router.get("/reviews/me", response_model=List[ReviewRecord], summary="List My Reviews")
async def list_my_reviews(
    user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return await service.list_user_reviews(user.id)


@router.post(
    "/reviews",
    response_model=ReviewMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Review",
)
async def create_review(
    payload: ReviewCreate,
    user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    review = await service.create_review(user.id, payload)
    return ReviewMutationResponse(message="Review created successfully", review=review)


@router.post("/reviews/{review_id}/like", response_model=LikeToggleResponse, summary="Toggle Review Like")
async def toggle_review_like(
    review_id: str,
    user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return await service.toggle_like(review_id, user.id)
