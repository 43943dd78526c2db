"""
Review repository: data access for review documents in MongoDB
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pydantic import ValidationError
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from restaurant_reviews.core.errors import StoreUnavailable
from restaurant_reviews.core.logger import logger
from restaurant_reviews.models.review import ReviewRecord

# Deleted flag may be absent on older documents
NOT_DELETED = {"is_deleted": {"$ne": True}}


class ReviewRepository:
    """Repository for review document access and rating aggregation"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    @staticmethod
    def _to_object_id(review_id: str) -> Optional[ObjectId]:
        return ObjectId(review_id) if ObjectId.is_valid(review_id) else None

    @staticmethod
    def _unavailable(operation: str, error: PyMongoError) -> StoreUnavailable:
        logger.error(
            f"MongoDB error during {operation}: {error}",
            metadata={"event": "review_store_error", "operation": operation, "error": str(error)}
        )
        return StoreUnavailable("reviews", f"Database error during {operation}")

    async def _find(self, query: Dict[str, Any], operation: str) -> List[ReviewRecord]:
        try:
            docs = await self.collection.find(query).sort("created_at", -1).to_list(length=None)
        except PyMongoError as e:
            raise self._unavailable(operation, e)
        records = []
        for doc in docs:
            try:
                records.append(ReviewRecord.from_document(doc))
            except ValidationError as e:
                logger.warning(
                    f"Skipping malformed review document {doc.get('_id')}",
                    metadata={
                        "event": "review_document_invalid",
                        "review_id": str(doc.get("_id")),
                        "operation": operation,
                        "fields": [".".join(str(part) for part in err["loc"]) for err in e.errors()],
                    }
                )
        return records

    async def create(self, record: ReviewRecord) -> ReviewRecord:
        """Insert a new review document"""
        try:
            doc = record.to_document()
            result = await self.collection.insert_one(doc)
        except PyMongoError as e:
            raise self._unavailable("review creation", e)
        return record.model_copy(update={"id": str(result.inserted_id)})

    async def get_by_id(self, review_id: str) -> Optional[ReviewRecord]:
        """Get a non-deleted review by id"""
        obj_id = self._to_object_id(review_id)
        if obj_id is None:
            return None
        try:
            doc = await self.collection.find_one({"_id": obj_id, **NOT_DELETED})
        except PyMongoError as e:
            raise self._unavailable("review retrieval", e)
        return ReviewRecord.from_document(doc) if doc else None

    async def list_by_restaurant(self, restaurant_id: int) -> List[ReviewRecord]:
        return await self._find({"restaurant_id": restaurant_id, **NOT_DELETED}, "restaurant review listing")

    async def list_by_user(self, user_id: int) -> List[ReviewRecord]:
        return await self._find({"user_id": user_id, **NOT_DELETED}, "user review listing")

    async def list_all(self) -> List[ReviewRecord]:
        return await self._find(dict(NOT_DELETED), "review listing")

    async def update(self, review_id: str, changes: Dict[str, Any]) -> Optional[ReviewRecord]:
        """Apply field changes to a non-deleted review and refresh updated_at"""
        obj_id = self._to_object_id(review_id)
        if obj_id is None:
            return None
        update_data = dict(changes)
        update_data["updated_at"] = datetime.now(timezone.utc)
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": obj_id, **NOT_DELETED},
                {"$set": update_data},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise self._unavailable("review update", e)
        return ReviewRecord.from_document(doc) if doc else None

    async def soft_delete(self, review_id: str) -> Optional[ReviewRecord]:
        """
        Flag a review as deleted. Deleting an already-deleted review succeeds
        again so the caller can still recompute its restaurant.
        """
        obj_id = self._to_object_id(review_id)
        if obj_id is None:
            return None
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": obj_id},
                {"$set": {"is_deleted": True, "updated_at": datetime.now(timezone.utc)}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise self._unavailable("review deletion", e)
        return ReviewRecord.from_document(doc) if doc else None

    async def toggle_like(self, review_id: str, user_id: int) -> Optional[Tuple[bool, ReviewRecord]]:
        """
        Flip the caller's membership in liked_by and move likes by one.

        Each branch is a single conditional update so a concurrent toggle by
        the same user cannot double count. Returns (liked, review) or None
        when the review does not exist or is deleted.
        """
        obj_id = self._to_object_id(review_id)
        if obj_id is None:
            return None
        now = datetime.now(timezone.utc)
        try:
            doc = await self.collection.find_one({"_id": obj_id, **NOT_DELETED})
            if not doc:
                return None

            if user_id in (doc.get("liked_by") or []):
                updated = await self.collection.find_one_and_update(
                    {"_id": obj_id, "liked_by": user_id},
                    [{"$set": {
                        "liked_by": {"$filter": {
                            "input": "$liked_by",
                            "cond": {"$ne": ["$$this", user_id]},
                        }},
                        "likes": {"$max": [0, {"$subtract": [{"$ifNull": ["$likes", 1]}, 1]}]},
                        "updated_at": now,
                    }}],
                    return_document=ReturnDocument.AFTER,
                )
            else:
                updated = await self.collection.find_one_and_update(
                    {"_id": obj_id, "liked_by": {"$ne": user_id}},
                    {
                        "$addToSet": {"liked_by": user_id},
                        "$inc": {"likes": 1},
                        "$set": {"updated_at": now},
                    },
                    return_document=ReturnDocument.AFTER,
                )

            if updated is None:
                # A concurrent toggle won the race; report the state it left
                updated = await self.collection.find_one({"_id": obj_id})
                if updated is None:
                    return None
        except PyMongoError as e:
            raise self._unavailable("like toggle", e)

        record = ReviewRecord.from_document(updated)
        return user_id in record.liked_by, record

    async def group_ratings(self, restaurant_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Average and count of non-deleted ratings grouped by restaurant.

        Restricted to one restaurant when restaurant_id is given. Each row is
        {"_id": restaurant_id, "average_rating": float, "review_count": int}.
        """
        match = dict(NOT_DELETED)
        if restaurant_id is not None:
            match["restaurant_id"] = restaurant_id
        pipeline = [
            {"$match": match},
            {"$group": {
                "_id": "$restaurant_id",
                "average_rating": {"$avg": "$rating"},
                "review_count": {"$sum": 1},
            }},
        ]
        try:
            return await self.collection.aggregate(pipeline).to_list(length=None)
        except PyMongoError as e:
            raise self._unavailable("rating aggregation", e)
