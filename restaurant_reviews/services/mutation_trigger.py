"""
Mutation trigger: recompute one restaurant's stats after a review write
"""

from restaurant_reviews.core.errors import InvalidReference, StoreUnavailable, SyncFailed
from restaurant_reviews.core.logger import logger
from restaurant_reviews.models.review import RatingAggregate
from restaurant_reviews.services.aggregation import AggregationEngine
from restaurant_reviews.services.consistency_sync import ConsistencySync


class MutationTrigger:
    """
    Inline recompute of the affected restaurant, run after the review write has
    succeeded and before the request returns.

    No lock is held between computing and writing, so two concurrent mutations
    on one restaurant may land their aggregates out of order; the
    reconciliation job repairs that.
    """

    def __init__(self, engine: AggregationEngine, sync: ConsistencySync):
        self.engine = engine
        self.sync = sync

    async def recompute(self, restaurant_id: int) -> RatingAggregate:
        """
        Raises:
            StoreUnavailable: reviews could not be read
            SyncFailed: the restaurant row could not be written
            InvalidReference: the restaurant row does not exist
        """
        aggregate = await self.engine.compute_one(restaurant_id)
        await self.sync.write_one(restaurant_id, aggregate)
        return aggregate

    async def fire(self, restaurant_id: int, reason: str) -> bool:
        """
        Best-effort recompute. Never raises for sync problems and never
        retries; returns whether the stats were written.
        """
        try:
            await self.recompute(restaurant_id)
            return True
        except InvalidReference:
            logger.warning(
                f"Review references missing restaurant {restaurant_id}; stats not updated",
                metadata={"event": "restaurant_stats_invalid_reference", "restaurant_id": restaurant_id, "reason": reason}
            )
        except SyncFailed as e:
            logger.error(
                f"Failed to update restaurant stats for restaurant ID {restaurant_id}",
                error=e,
                metadata={"event": "restaurant_stats_trigger_failed", "reason": reason, **e.details}
            )
        except StoreUnavailable as e:
            logger.error(
                f"Could not compute restaurant stats for restaurant ID {restaurant_id}",
                error=e,
                metadata={"event": "restaurant_stats_trigger_failed", "restaurant_id": restaurant_id, "reason": reason}
            )
        except Exception as e:
            logger.error(
                f"Unexpected error updating restaurant stats for restaurant ID {restaurant_id}",
                error=e,
                metadata={"event": "restaurant_stats_trigger_error", "restaurant_id": restaurant_id, "reason": reason}
            )
        return False
