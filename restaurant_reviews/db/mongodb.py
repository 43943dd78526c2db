"""
MongoDB connection management for the review document store
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING, IndexModel
from pymongo.errors import PyMongoError

from restaurant_reviews.core.config import config
from restaurant_reviews.core.errors import StoreUnavailable
from restaurant_reviews.core.logger import logger

REVIEW_COLLECTION = "reviews"


class Database:
    """Database connection manager"""

    client: Optional[AsyncIOMotorClient] = None
    database: Optional[AsyncIOMotorDatabase] = None


db = Database()


async def connect_to_mongo():
    """Create database connection"""
    logger.info("Connecting to MongoDB...")

    try:
        db.client = AsyncIOMotorClient(
            config.mongodb_url,
            serverSelectionTimeoutMS=config.mongodb_server_selection_timeout_ms,
        )
        db.database = db.client[config.mongodb_database]

        # Test connection
        await db.client.admin.command('ping')

        logger.info(
            f"Successfully connected to MongoDB database '{config.mongodb_database}'",
            metadata={
                "event": "mongodb_connected",
                "database": config.mongodb_database,
                "host": config.mongodb_host,
                "port": config.mongodb_port
            }
        )
    except PyMongoError as e:
        logger.error(
            f"Could not connect to MongoDB: {e}",
            metadata={"event": "mongodb_connection_error", "error": str(e)}
        )
        raise StoreUnavailable("reviews", f"Could not connect to MongoDB: {e}")


async def close_mongo_connection():
    """Close database connection"""
    logger.info("Closing connection to MongoDB...")
    if db.client is not None:
        db.client.close()
    db.client = None
    db.database = None


async def get_database() -> AsyncIOMotorDatabase:
    """Get database instance"""
    if db.database is None:
        await connect_to_mongo()
    return db.database


async def get_review_collection() -> AsyncIOMotorCollection:
    """Get reviews collection"""
    database = await get_database()
    return database[REVIEW_COLLECTION]


async def ensure_review_indexes():
    """Create the indexes the aggregation and listing queries rely on"""
    collection = await get_review_collection()
    indexes = [
        IndexModel([("restaurant_id", ASCENDING), ("is_deleted", ASCENDING)], name="restaurant_active_idx"),
        IndexModel([("user_id", ASCENDING)], name="user_idx"),
    ]
    try:
        await collection.create_indexes(indexes)
        logger.info("Review indexes ensured", metadata={"event": "review_indexes_created"})
    except PyMongoError as e:
        logger.warning(
            f"Could not create review indexes: {e}",
            metadata={"event": "review_indexes_failed", "error": str(e)}
        )
