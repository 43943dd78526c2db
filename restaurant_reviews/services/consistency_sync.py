"""
Consistency sync: writes computed rating aggregates into the restaurant rows
"""

from typing import Iterable, Mapping

from restaurant_reviews.core.errors import InvalidReference, StoreUnavailable, SyncFailed
from restaurant_reviews.core.logger import logger
from restaurant_reviews.models.review import RatingAggregate
from restaurant_reviews.repositories.restaurant import RestaurantRepository
from restaurant_reviews.schemas.rating import SyncReport


class ConsistencySync:
    """
    Propagates aggregates from the review store into the relational store.

    There is no transaction spanning the two stores and none across rows: each
    row write stands alone and a failed one does not undo the others.
    """

    def __init__(self, restaurant_repository: RestaurantRepository):
        self.restaurant_repository = restaurant_repository

    async def write_one(self, restaurant_id: int, aggregate: RatingAggregate) -> None:
        """
        Set average_rating, review_count and updated_at for one restaurant.

        Raises:
            SyncFailed: the relational write failed
            InvalidReference: no restaurant row has this id
        """
        try:
            matched = await self.restaurant_repository.update_aggregate(
                restaurant_id, aggregate.average_rating, aggregate.review_count
            )
        except StoreUnavailable as e:
            logger.error(
                f"Failed to update restaurant stats for restaurant ID {restaurant_id}",
                error=e,
                metadata={
                    "event": "restaurant_stats_sync_failed",
                    "restaurant_id": restaurant_id,
                    "average_rating": aggregate.average_rating,
                    "review_count": aggregate.review_count,
                }
            )
            raise SyncFailed(restaurant_id, aggregate.average_rating, aggregate.review_count, cause=e) from e

        if not matched:
            raise InvalidReference(restaurant_id)

        logger.info(
            f"Updated restaurant {restaurant_id} stats: "
            f"avg={aggregate.average_rating:.2f}, count={aggregate.review_count}",
            metadata={
                "event": "restaurant_stats_updated",
                "restaurant_id": restaurant_id,
                "average_rating": aggregate.average_rating,
                "review_count": aggregate.review_count,
            }
        )

    async def write_all(
        self,
        aggregates: Mapping[int, RatingAggregate],
        all_restaurant_ids: Iterable[int],
    ) -> SyncReport:
        """
        Write every computed aggregate and zero out every restaurant that has
        none, so a restaurant whose last review was deleted stops showing stale
        stats. Aggregates for ids unknown to the relational store are skipped.
        """
        report = SyncReport()
        known_ids = list(dict.fromkeys(all_restaurant_ids))
        known = set(known_ids)

        for restaurant_id, aggregate in aggregates.items():
            if restaurant_id not in known:
                logger.warning(
                    f"Reviews reference missing restaurant {restaurant_id}; skipping",
                    metadata={
                        "event": "restaurant_stats_invalid_reference",
                        "restaurant_id": restaurant_id,
                        "review_count": aggregate.review_count,
                    }
                )
                report.skipped.append(restaurant_id)
                continue
            await self._write_row(restaurant_id, aggregate, report.updated, report)

        to_reset = [rid for rid in known_ids if rid not in aggregates]
        if to_reset:
            logger.info(
                f"Resetting stats for {len(to_reset)} restaurants with no reviews",
                metadata={"event": "restaurant_stats_reset", "count": len(to_reset)}
            )
        for restaurant_id in to_reset:
            await self._write_row(restaurant_id, RatingAggregate.empty(), report.reset, report)

        return report

    async def _write_row(self, restaurant_id, aggregate, succeeded: list, report: SyncReport) -> None:
        try:
            await self.write_one(restaurant_id, aggregate)
            succeeded.append(restaurant_id)
        except InvalidReference:
            # Row deleted between listing ids and writing
            report.skipped.append(restaurant_id)
        except SyncFailed:
            report.failed.append(restaurant_id)
