#!/usr/bin/env python3
"""
Recompute average_rating and review_count for every restaurant.

Run on a schedule (for example from cron) to repair drift between the review
documents and the restaurant rows. Exits non-zero when a store is unreachable
or when some rows failed to sync.
"""

import asyncio
import sys
import uuid
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from restaurant_reviews.core.errors import StoreUnavailable
from restaurant_reviews.db.mongodb import close_mongo_connection, get_review_collection
from restaurant_reviews.db.postgres import close_postgres_connection, get_session_factory
from restaurant_reviews.dependencies.services import build_rating_service
from restaurant_reviews.middleware.correlation_id import set_correlation_id
from restaurant_reviews.repositories.restaurant import RestaurantRepository
from restaurant_reviews.repositories.review import ReviewRepository


async def reconcile() -> int:
    # One id groups every log line of this run
    set_correlation_id(f"reconcile-{uuid.uuid4()}")
    try:
        service = build_rating_service(
            ReviewRepository(await get_review_collection()),
            RestaurantRepository(await get_session_factory()),
        )
        report = await service.reconcile_all()
    except StoreUnavailable as e:
        print(f"Reconciliation aborted: {e.message}")
        return 2
    finally:
        await close_postgres_connection()
        await close_mongo_connection()

    print(report.model_dump_json(indent=2))
    return 1 if report.restaurants_failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(reconcile()))
