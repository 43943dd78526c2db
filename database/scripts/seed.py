#!/usr/bin/env python3

import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from sqlalchemy import delete

from restaurant_reviews.db.mongodb import (
    close_mongo_connection,
    connect_to_mongo,
    ensure_review_indexes,
    get_review_collection,
)
from restaurant_reviews.db.postgres import close_postgres_connection, connect_to_postgres, pg
from restaurant_reviews.dependencies.services import build_rating_service
from restaurant_reviews.models.relational import Base, Restaurant, UserAccount
from restaurant_reviews.repositories.restaurant import RestaurantRepository
from restaurant_reviews.repositories.review import ReviewRepository


SAMPLE_USERS = [
    {"username": "somchai", "profile_picture_url": None},
    {"username": "malee", "profile_picture_url": None},
    {"username": "niran", "profile_picture_url": None},
]

SAMPLE_RESTAURANTS = [
    {"name": "Baan Khanitha", "address": "Sukhumvit 23, Bangkok"},
    {"name": "Jay Fai", "address": "327 Maha Chai Rd, Bangkok"},
    {"name": "Som Tam Nua", "address": "Siam Square Soi 5, Bangkok"},
    {"name": "Thipsamai", "address": "313 Maha Chai Rd, Bangkok"},
]

# (restaurant index, user index, rating, comment)
SAMPLE_REVIEWS = [
    (0, 0, 5, "Excellent green curry"),
    (0, 1, 3, "Good but slow service"),
    (0, 2, 4, None),
    (1, 0, 5, "Worth the queue"),
    (1, 2, 4, "Crab omelette is huge"),
    (2, 1, 4, "Spicy and fresh"),
]


class ReviewDatabaseSeeder:
    async def connect(self):
        """Establish connections to both stores"""
        print("Connecting to MongoDB and PostgreSQL...")
        await connect_to_mongo()
        await connect_to_postgres()
        print("Successfully connected!")

    async def seed_data(self):
        """Main seeding method"""
        print("Seeding restaurant review data...")
        try:
            await self.create_schema()
            await self.clear_data()
            restaurant_ids, user_ids = await self.seed_relational()
            await self.seed_reviews(restaurant_ids, user_ids)
            await self.reconcile()
            print("Restaurant review data seeding completed successfully!")
        except Exception as error:
            print(f"Error seeding data: {error}")
            raise

    async def create_schema(self):
        async with pg.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def clear_data(self):
        print("Clearing existing data...")
        collection = await get_review_collection()
        result = await collection.delete_many({})
        print(f"Deleted {result.deleted_count} existing reviews")

        async with pg.session_factory() as session:
            async with session.begin():
                await session.execute(delete(Restaurant))
                await session.execute(delete(UserAccount))

    async def seed_relational(self):
        async with pg.session_factory() as session:
            async with session.begin():
                users = [UserAccount(**u) for u in SAMPLE_USERS]
                restaurants = [Restaurant(**r) for r in SAMPLE_RESTAURANTS]
                session.add_all(users + restaurants)
                await session.flush()
                user_ids = [u.id for u in users]
                restaurant_ids = [r.id for r in restaurants]
        print(f"Seeded {len(restaurant_ids)} restaurants and {len(user_ids)} users")
        return restaurant_ids, user_ids

    async def seed_reviews(self, restaurant_ids, user_ids):
        now = datetime.now(timezone.utc)
        docs = [
            {
                "user_id": user_ids[u],
                "restaurant_id": restaurant_ids[r],
                "rating": rating,
                "comment": comment,
                "images": [],
                "likes": 0,
                "liked_by": [],
                "helpful_count": 0,
                "is_deleted": False,
                "created_at": now,
                "updated_at": now,
            }
            for r, u, rating, comment in SAMPLE_REVIEWS
        ]
        collection = await get_review_collection()
        result = await collection.insert_many(docs)
        await ensure_review_indexes()
        print(f"Seeded {len(result.inserted_ids)} reviews")

    async def reconcile(self):
        collection = await get_review_collection()
        service = build_rating_service(
            ReviewRepository(collection),
            RestaurantRepository(pg.session_factory),
        )
        report = await service.reconcile_all()
        print(
            f"Reconciled stats: {report.restaurants_updated} updated, "
            f"{report.restaurants_reset} reset"
        )

    async def close(self):
        await close_postgres_connection()
        await close_mongo_connection()
        print("Database connections closed")


async def main():
    seeder = ReviewDatabaseSeeder()
    try:
        await seeder.connect()
        await seeder.seed_data()
    finally:
        await seeder.close()


if __name__ == "__main__":
    asyncio.run(main())
