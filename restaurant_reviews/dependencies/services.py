"""
Dependency injection for repositories and services
"""

from fastapi import Depends, Request

from restaurant_reviews.db.mongodb import get_review_collection
from restaurant_reviews.db.postgres import get_session_factory
from restaurant_reviews.repositories.restaurant import RestaurantRepository
from restaurant_reviews.repositories.review import ReviewRepository
from restaurant_reviews.repositories.user import UserRepository
from restaurant_reviews.services.aggregation import AggregationEngine
from restaurant_reviews.services.consistency_sync import ConsistencySync
from restaurant_reviews.services.mutation_trigger import MutationTrigger
from restaurant_reviews.services.pending_updates import PendingUpdateCache
from restaurant_reviews.services.rating import RatingService
from restaurant_reviews.services.reconciliation import ReconciliationJob
from restaurant_reviews.services.review import ReviewService


async def get_review_repository() -> ReviewRepository:
    """Get review repository instance"""
    collection = await get_review_collection()
    return ReviewRepository(collection)


async def get_restaurant_repository() -> RestaurantRepository:
    """Get restaurant repository instance"""
    session_factory = await get_session_factory()
    return RestaurantRepository(session_factory)


async def get_user_repository() -> UserRepository:
    session_factory = await get_session_factory()
    return UserRepository(session_factory)


def build_rating_service(
    review_repository: ReviewRepository,
    restaurant_repository: RestaurantRepository,
) -> RatingService:
    """Assemble the aggregation, sync, trigger and reconciliation components"""
    engine = AggregationEngine(review_repository)
    sync = ConsistencySync(restaurant_repository)
    trigger = MutationTrigger(engine, sync)
    job = ReconciliationJob(engine, sync, restaurant_repository)
    return RatingService(engine, trigger, job)


async def get_rating_service(
    review_repository: ReviewRepository = Depends(get_review_repository),
    restaurant_repository: RestaurantRepository = Depends(get_restaurant_repository),
) -> RatingService:
    """Get rating service instance"""
    return build_rating_service(review_repository, restaurant_repository)


async def get_review_service(
    review_repository: ReviewRepository = Depends(get_review_repository),
    user_repository: UserRepository = Depends(get_user_repository),
    restaurant_repository: RestaurantRepository = Depends(get_restaurant_repository),
    rating_service: RatingService = Depends(get_rating_service),
) -> ReviewService:
    """Get review service instance"""
    return ReviewService(review_repository, user_repository, restaurant_repository, rating_service.trigger)


def get_pending_update_cache(request: Request) -> PendingUpdateCache:
    """The process-wide cache created in the application lifespan"""
    return request.app.state.pending_updates
