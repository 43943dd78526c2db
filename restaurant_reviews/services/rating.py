"""
Rating service: the in-process entry points of the rating consistency engine
"""

from restaurant_reviews.models.review import RatingAggregate
from restaurant_reviews.schemas.rating import ReconciliationReport
from restaurant_reviews.services.aggregation import AggregationEngine
from restaurant_reviews.services.mutation_trigger import MutationTrigger
from restaurant_reviews.services.reconciliation import ReconciliationJob


class RatingService:
    """Facade used by the request layer and administrative tooling"""

    def __init__(self, engine: AggregationEngine, trigger: MutationTrigger, job: ReconciliationJob):
        self.engine = engine
        self.trigger = trigger
        self.job = job

    async def recompute_restaurant(self, restaurant_id: int) -> None:
        """Recompute and store one restaurant's stats; failures propagate"""
        await self.trigger.recompute(restaurant_id)

    async def reconcile_all(self) -> ReconciliationReport:
        return await self.job.run()

    async def get_aggregate_snapshot(self, restaurant_id: int) -> RatingAggregate:
        """Live stats from the review documents, not the stored copy"""
        return await self.engine.compute_one(restaurant_id)
