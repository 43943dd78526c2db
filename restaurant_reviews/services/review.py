"""
Review service containing the review business flow.

Every successful write ends with an inline stats recompute of the owning
restaurant. That recompute is best effort: its failures are logged and never
change the outcome of the review operation.
"""

from typing import Dict, List, Optional

from bson import ObjectId

from restaurant_reviews.core.errors import ErrorResponse, StoreUnavailable
from restaurant_reviews.core.logger import logger
from restaurant_reviews.models.review import ReviewRecord
from restaurant_reviews.repositories.restaurant import RestaurantRepository
from restaurant_reviews.repositories.review import ReviewRepository
from restaurant_reviews.repositories.user import UserRepository
from restaurant_reviews.schemas.review import (
    LikeToggleResponse,
    ReviewAuthor,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
)
from restaurant_reviews.services.mutation_trigger import MutationTrigger


def _require_valid_id(review_id: str) -> None:
    if not ObjectId.is_valid(review_id):
        raise ErrorResponse("Invalid review ID format", status_code=400)


class ReviewService:
    """Service layer for review business logic"""

    def __init__(
        self,
        review_repository: ReviewRepository,
        user_repository: UserRepository,
        restaurant_repository: RestaurantRepository,
        trigger: MutationTrigger,
    ):
        self.review_repository = review_repository
        self.user_repository = user_repository
        self.restaurant_repository = restaurant_repository
        self.trigger = trigger

    async def _authors(self, reviews: List[ReviewRecord]) -> Dict[int, ReviewAuthor]:
        try:
            return await self.user_repository.get_authors(r.user_id for r in reviews)
        except StoreUnavailable as e:
            logger.warning(
                "User details unavailable; reviews shown as Anonymous",
                metadata={"event": "review_author_lookup_failed", "error": e.message}
            )
            return {}

    async def _decorate(self, reviews: List[ReviewRecord], with_restaurant: bool = False) -> List[ReviewResponse]:
        authors = await self._authors(reviews)
        names: Dict[int, str] = {}
        if with_restaurant:
            try:
                names = await self.restaurant_repository.get_names(r.restaurant_id for r in reviews)
            except StoreUnavailable as e:
                logger.warning(
                    "Restaurant names unavailable for review listing",
                    metadata={"event": "review_restaurant_lookup_failed", "error": e.message}
                )

        decorated = []
        for review in reviews:
            author = authors.get(review.user_id, ReviewAuthor())
            decorated.append(ReviewResponse(
                **review.model_dump(),
                username=author.username,
                user_details=author,
                restaurant_name=names.get(review.restaurant_id, "Unknown Restaurant") if with_restaurant else None,
            ))
        return decorated

    async def list_restaurant_reviews(self, restaurant_id: int) -> List[ReviewResponse]:
        reviews = await self.review_repository.list_by_restaurant(restaurant_id)
        logger.info(
            f"Found {len(reviews)} reviews for restaurant {restaurant_id}",
            metadata={"event": "list_restaurant_reviews", "restaurant_id": restaurant_id}
        )
        return await self._decorate(reviews)

    async def list_user_reviews(self, user_id: int) -> List[ReviewRecord]:
        return await self.review_repository.list_by_user(user_id)

    async def list_all_reviews(self) -> List[ReviewResponse]:
        reviews = await self.review_repository.list_all()
        logger.info(
            f"Found {len(reviews)} reviews in admin listing",
            metadata={"event": "list_all_reviews"}
        )
        return await self._decorate(reviews, with_restaurant=True)

    async def get_review(self, review_id: str) -> ReviewRecord:
        _require_valid_id(review_id)
        review = await self.review_repository.get_by_id(review_id)
        if not review:
            raise ErrorResponse("Review not found", status_code=404)
        return review

    async def create_review(self, user_id: int, payload: ReviewCreate) -> ReviewRecord:
        record = ReviewRecord(
            user_id=user_id,
            restaurant_id=payload.restaurant_id,
            rating=payload.rating,
            comment=payload.comment,
            images=payload.images,
        )
        review = await self.review_repository.create(record)

        logger.info(
            f"Created review {review.id}",
            user_id=user_id,
            metadata={"event": "create_review", "review_id": review.id, "restaurant_id": review.restaurant_id}
        )

        await self.trigger.fire(review.restaurant_id, reason="review_created")
        return review

    async def update_review(self, review_id: str, payload: ReviewUpdate, updated_by: Optional[int] = None) -> ReviewRecord:
        _require_valid_id(review_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "comment" in changes:
            changes["comment"] = changes["comment"].strip()

        review = await self.review_repository.update(review_id, changes)
        if not review:
            raise ErrorResponse("Review not found or no changes made", status_code=404)

        logger.info(
            f"Updated review {review_id}",
            user_id=updated_by,
            metadata={"event": "update_review", "review_id": review_id, "fields": sorted(changes)}
        )

        await self.trigger.fire(review.restaurant_id, reason="review_updated")
        return review

    async def delete_review(self, review_id: str, deleted_by: Optional[int] = None) -> None:
        """Soft delete; the document stays but no longer counts"""
        _require_valid_id(review_id)
        review = await self.review_repository.soft_delete(review_id)
        if not review:
            raise ErrorResponse("Review not found", status_code=404)

        logger.info(
            f"Soft deleted review {review_id}",
            user_id=deleted_by,
            metadata={"event": "soft_delete_review", "review_id": review_id, "restaurant_id": review.restaurant_id}
        )

        await self.trigger.fire(review.restaurant_id, reason="review_deleted")

    async def toggle_like(self, review_id: str, user_id: int) -> LikeToggleResponse:
        _require_valid_id(review_id)
        result = await self.review_repository.toggle_like(review_id, user_id)
        if result is None:
            raise ErrorResponse("Review not found", status_code=404)

        liked, review = result
        logger.info(
            f"{'Liked' if liked else 'Unliked'} review {review_id}",
            user_id=user_id,
            metadata={"event": "toggle_review_like", "review_id": review_id, "likes": review.likes}
        )

        await self.trigger.fire(review.restaurant_id, reason="review_like_toggled")
        return LikeToggleResponse(liked=liked, likes=review.likes)
