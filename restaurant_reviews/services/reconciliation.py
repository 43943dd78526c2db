"""
Reconciliation job: recompute and rewrite rating stats for every restaurant
"""

import time

from restaurant_reviews.core.logger import logger
from restaurant_reviews.repositories.restaurant import RestaurantRepository
from restaurant_reviews.schemas.rating import ReconciliationReport
from restaurant_reviews.services.aggregation import AggregationEngine
from restaurant_reviews.services.consistency_sync import ConsistencySync


class ReconciliationJob:
    """
    Full drift-repair pass over both stores.

    Safe to re-run at any time and to interleave with per-review recomputes on
    other restaurants. Only a StoreUnavailable while listing restaurants or
    reading reviews aborts the run; row-level failures are counted instead.
    """

    def __init__(
        self,
        engine: AggregationEngine,
        sync: ConsistencySync,
        restaurant_repository: RestaurantRepository,
    ):
        self.engine = engine
        self.sync = sync
        self.restaurant_repository = restaurant_repository

    async def run(self) -> ReconciliationReport:
        started = time.monotonic()

        restaurant_ids = await self.restaurant_repository.list_ids()
        logger.info(
            f"Found {len(restaurant_ids)} total restaurants",
            metadata={"event": "reconciliation_started", "restaurant_count": len(restaurant_ids)}
        )

        aggregates = await self.engine.compute_all()
        sync_report = await self.sync.write_all(aggregates, restaurant_ids)

        report = ReconciliationReport(
            restaurants_updated=len(sync_report.updated),
            restaurants_with_reviews=len(aggregates),
            restaurants_reset=len(sync_report.reset),
            restaurants_skipped=len(sync_report.skipped),
            restaurants_failed=len(sync_report.failed),
            failed_restaurant_ids=sync_report.failed,
        )
        if sync_report.failed:
            report.message = "Restaurant statistics updated with failures"

        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "Reconciliation completed",
            metadata={
                "event": "reconciliation_completed",
                **report.model_dump(exclude={"message"}),
            }
        )
        logger.performance("reconcile_restaurant_stats", duration_ms, threshold_ms=30000)
        return report
