"""
Aggregation engine: rating stats computed from the review documents
"""

from typing import Dict

from restaurant_reviews.core.logger import logger
from restaurant_reviews.models.review import RatingAggregate
from restaurant_reviews.repositories.review import ReviewRepository


def _to_aggregate(row: dict) -> RatingAggregate:
    count = int(row.get("review_count") or 0)
    if count == 0:
        return RatingAggregate.empty()
    return RatingAggregate(
        average_rating=float(row.get("average_rating") or 0.0),
        review_count=count,
    )


class AggregationEngine:
    """
    Computes (average_rating, review_count) over non-deleted reviews.

    The average is the plain arithmetic mean of the integer ratings. Reads
    only; a StoreUnavailable from the repository propagates unchanged, so no
    partial result is ever returned.
    """

    def __init__(self, review_repository: ReviewRepository):
        self.review_repository = review_repository

    async def compute_one(self, restaurant_id: int) -> RatingAggregate:
        """Aggregate for one restaurant; zero stats when it has no reviews"""
        rows = await self.review_repository.group_ratings(restaurant_id)
        aggregate = _to_aggregate(rows[0]) if rows else RatingAggregate.empty()

        logger.debug(
            f"Computed rating stats for restaurant {restaurant_id}",
            metadata={
                "event": "restaurant_stats_computed",
                "restaurant_id": restaurant_id,
                "average_rating": aggregate.average_rating,
                "review_count": aggregate.review_count,
            }
        )
        return aggregate

    async def compute_all(self) -> Dict[int, RatingAggregate]:
        """
        Aggregates for every restaurant that has at least one qualifying
        review, in a single grouped pass. Restaurants without reviews are
        absent from the mapping.
        """
        rows = await self.review_repository.group_ratings()
        aggregates: Dict[int, RatingAggregate] = {}
        for row in rows:
            restaurant_id = row.get("_id")
            if restaurant_id is None:
                # Reviews missing restaurant_id group under null
                logger.warning(
                    "Skipping reviews with no restaurant reference",
                    metadata={"event": "restaurant_stats_null_reference", "review_count": row.get("review_count")}
                )
                continue
            aggregates[int(restaurant_id)] = _to_aggregate(row)

        logger.info(
            f"Found stats for {len(aggregates)} restaurants",
            metadata={"event": "restaurant_stats_computed_all", "restaurants_with_reviews": len(aggregates)}
        )
        return aggregates
