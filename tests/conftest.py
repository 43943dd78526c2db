"""Shared test fixtures"""
from datetime import datetime, timezone
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import jwt
import pytest
from bson import ObjectId

from restaurant_reviews.core.config import config
from restaurant_reviews.core.errors import StoreUnavailable
from restaurant_reviews.models.review import RatingAggregate, ReviewRecord


class InMemoryReviewStore:
    """Review store double that answers group_ratings like the MongoDB pipeline"""

    def __init__(self):
        self.docs: Dict[str, dict] = {}
        self.unavailable = False

    def add(self, restaurant_id: int, rating: int, user_id: int = 1) -> str:
        review_id = str(ObjectId())
        self.docs[review_id] = {
            "restaurant_id": restaurant_id,
            "user_id": user_id,
            "rating": rating,
            "is_deleted": False,
        }
        return review_id

    def soft_delete(self, review_id: str) -> None:
        self.docs[review_id]["is_deleted"] = True

    async def group_ratings(self, restaurant_id: Optional[int] = None) -> List[dict]:
        if self.unavailable:
            raise StoreUnavailable("reviews")
        groups: Dict[int, List[int]] = {}
        for doc in self.docs.values():
            if doc.get("is_deleted") is True:
                continue
            if restaurant_id is not None and doc["restaurant_id"] != restaurant_id:
                continue
            groups.setdefault(doc["restaurant_id"], []).append(doc["rating"])
        return [
            {"_id": rid, "average_rating": sum(r) / len(r), "review_count": len(r)}
            for rid, r in groups.items()
        ]


class InMemoryRestaurantStore:
    """Restaurant aggregate store double with per-row failure injection"""

    def __init__(self, restaurant_ids):
        self.rows = {
            rid: {"average_rating": 0.0, "review_count": 0, "updated_at": None}
            for rid in restaurant_ids
        }
        self.failing_ids = set()
        self.writes: List[int] = []

    async def list_ids(self) -> List[int]:
        return sorted(self.rows)

    async def update_aggregate(self, restaurant_id, average_rating, review_count) -> bool:
        if restaurant_id in self.failing_ids:
            raise StoreUnavailable("restaurants")
        self.writes.append(restaurant_id)
        if restaurant_id not in self.rows:
            return False
        self.rows[restaurant_id] = {
            "average_rating": average_rating,
            "review_count": review_count,
            "updated_at": datetime.now(timezone.utc),
        }
        return True

    async def get_stored_aggregate(self, restaurant_id) -> Optional[RatingAggregate]:
        row = self.rows.get(restaurant_id)
        if row is None:
            return None
        return RatingAggregate(average_rating=row["average_rating"], review_count=row["review_count"])


@pytest.fixture
def review_store():
    return InMemoryReviewStore()


@pytest.fixture
def restaurant_store():
    return InMemoryRestaurantStore([41, 42, 43])


@pytest.fixture
def mock_collection():
    """Mock MongoDB collection; find/aggregate return cursors synchronously like motor"""
    collection = AsyncMock()
    collection.find = MagicMock()
    collection.aggregate = MagicMock()
    return collection


@pytest.fixture
def make_cursor():
    """Build a motor-style cursor whose to_list yields the given documents"""
    def _make(docs):
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.to_list = AsyncMock(return_value=docs)
        return cursor
    return _make


@pytest.fixture
def review_id():
    """Sample review ID for testing"""
    return "507f1f77bcf86cd799439011"


@pytest.fixture
def review_doc(review_id):
    """Review document as stored in MongoDB"""
    now = datetime.now(timezone.utc)
    return {
        "_id": ObjectId(review_id),
        "user_id": 7,
        "restaurant_id": 42,
        "rating": 4,
        "comment": "Great noodles",
        "images": ["https://img.example.com/1.jpg"],
        "likes": 1,
        "liked_by": [9],
        "helpful_count": 0,
        "is_deleted": False,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def sample_review(review_doc):
    return ReviewRecord.from_document(review_doc)


def _token(user_id: int, roles=None) -> str:
    return jwt.encode(
        {"id": user_id, "email": f"user{user_id}@example.com", "roles": roles or ["user"]},
        config.jwt_secret,
        algorithm=config.jwt_algorithm,
    )


@pytest.fixture
def make_token():
    return _token


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {_token(7)}"}


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {_token(1, roles=['admin', 'user'])}"}
