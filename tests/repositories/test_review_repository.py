"""Tests for the MongoDB review repository"""
import copy

import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from restaurant_reviews.core.errors import StoreUnavailable
from restaurant_reviews.models.review import ReviewRecord
from restaurant_reviews.repositories.review import NOT_DELETED, ReviewRepository


@pytest.fixture
def repository(mock_collection):
    return ReviewRepository(mock_collection)


class TestReviewQueries:
    """Reads exclude soft-deleted reviews"""

    @pytest.mark.asyncio
    async def test_get_by_id(self, repository, mock_collection, review_doc, review_id):
        mock_collection.find_one.return_value = review_doc

        review = await repository.get_by_id(review_id)

        assert review.id == review_id
        query = mock_collection.find_one.call_args[0][0]
        assert query["_id"] == ObjectId(review_id)
        assert query["is_deleted"] == {"$ne": True}

    @pytest.mark.asyncio
    async def test_get_by_id_invalid_format(self, repository, mock_collection):
        assert await repository.get_by_id("not-an-id") is None
        mock_collection.find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_by_restaurant(self, repository, mock_collection, make_cursor, review_doc):
        cursor = make_cursor([review_doc])
        mock_collection.find.return_value = cursor

        reviews = await repository.list_by_restaurant(42)

        assert len(reviews) == 1
        mock_collection.find.assert_called_once_with({"restaurant_id": 42, **NOT_DELETED})
        cursor.sort.assert_called_once_with("created_at", -1)

    @pytest.mark.asyncio
    async def test_list_all_skips_malformed_documents(self, repository, mock_collection, make_cursor, review_doc):
        orphan = {k: v for k, v in review_doc.items() if k != "restaurant_id"}
        orphan["_id"] = ObjectId()
        out_of_range = {**review_doc, "_id": ObjectId(), "rating": 9}
        mock_collection.find.return_value = make_cursor([orphan, review_doc, out_of_range])

        reviews = await repository.list_all()

        assert [review.id for review in reviews] == [str(review_doc["_id"])]

    @pytest.mark.asyncio
    async def test_list_by_user_skips_malformed_documents(self, repository, mock_collection, make_cursor, review_doc):
        orphan = {k: v for k, v in review_doc.items() if k != "restaurant_id"}
        mock_collection.find.return_value = make_cursor([orphan])

        assert await repository.list_by_user(7) == []

    @pytest.mark.asyncio
    async def test_list_maps_driver_errors(self, repository, mock_collection, make_cursor):
        cursor = make_cursor([])
        cursor.to_list.side_effect = ServerSelectionTimeoutError("no servers")
        mock_collection.find.return_value = cursor

        with pytest.raises(StoreUnavailable) as exc_info:
            await repository.list_by_user(7)
        assert exc_info.value.store == "reviews"


class TestReviewWrites:

    @pytest.mark.asyncio
    async def test_create_assigns_id(self, repository, mock_collection):
        new_id = ObjectId()
        mock_collection.insert_one.return_value = MagicMock(inserted_id=new_id)
        record = ReviewRecord(user_id=7, restaurant_id=42, rating=5)

        created = await repository.create(record)

        assert created.id == str(new_id)
        inserted = mock_collection.insert_one.call_args[0][0]
        assert "id" not in inserted
        assert inserted["is_deleted"] is False

    @pytest.mark.asyncio
    async def test_update_sets_updated_at(self, repository, mock_collection, review_doc, review_id):
        mock_collection.find_one_and_update.return_value = {**review_doc, "rating": 2}

        review = await repository.update(review_id, {"rating": 2})

        assert review.rating == 2
        query, update = mock_collection.find_one_and_update.call_args[0]
        assert query["is_deleted"] == {"$ne": True}
        assert update["$set"]["rating"] == 2
        assert "updated_at" in update["$set"]

    @pytest.mark.asyncio
    async def test_soft_delete_matches_already_deleted(self, repository, mock_collection, review_doc, review_id):
        mock_collection.find_one_and_update.return_value = {**review_doc, "is_deleted": True}

        review = await repository.soft_delete(review_id)

        assert review.is_deleted is True
        query, update = mock_collection.find_one_and_update.call_args[0]
        assert query == {"_id": ObjectId(review_id)}
        assert update["$set"]["is_deleted"] is True

    @pytest.mark.asyncio
    async def test_soft_delete_missing(self, repository, mock_collection, review_id):
        mock_collection.find_one_and_update.return_value = None
        assert await repository.soft_delete(review_id) is None


class TestToggleLike:

    @pytest.mark.asyncio
    async def test_like_adds_user(self, repository, mock_collection, review_doc, review_id):
        mock_collection.find_one.return_value = review_doc
        mock_collection.find_one_and_update.return_value = {**review_doc, "likes": 2, "liked_by": [9, 7]}

        liked, review = await repository.toggle_like(review_id, 7)

        assert liked is True
        assert review.likes == 2
        query, update = mock_collection.find_one_and_update.call_args[0]
        assert query["liked_by"] == {"$ne": 7}
        assert update["$addToSet"] == {"liked_by": 7}
        assert update["$inc"] == {"likes": 1}

    @pytest.mark.asyncio
    async def test_unlike_removes_user(self, repository, mock_collection, review_doc, review_id):
        mock_collection.find_one.return_value = review_doc
        mock_collection.find_one_and_update.return_value = {**review_doc, "likes": 0, "liked_by": []}

        liked, review = await repository.toggle_like(review_id, 9)

        assert liked is False
        assert review.likes == 0
        query, pipeline = mock_collection.find_one_and_update.call_args[0]
        assert query["liked_by"] == 9
        assert isinstance(pipeline, list)

    @pytest.mark.asyncio
    async def test_lost_race_rereads_state(self, repository, mock_collection, review_doc, review_id):
        mock_collection.find_one.side_effect = [review_doc, {**review_doc, "likes": 2, "liked_by": [9, 7]}]
        mock_collection.find_one_and_update.return_value = None

        liked, review = await repository.toggle_like(review_id, 7)

        assert liked is True
        assert review.likes == 2

    @pytest.mark.asyncio
    async def test_missing_review(self, repository, mock_collection, review_id):
        mock_collection.find_one.return_value = None
        assert await repository.toggle_like(review_id, 7) is None
        mock_collection.find_one_and_update.assert_not_called()


class InMemoryCollection:
    """Single-document collection that applies the like-toggle updates the way MongoDB does"""

    def __init__(self, doc):
        self.doc = copy.deepcopy(doc)

    def _matches(self, query):
        for field, expected in query.items():
            actual = self.doc.get(field)
            if isinstance(expected, dict) and "$ne" in expected:
                if isinstance(actual, list):
                    if expected["$ne"] in actual:
                        return False
                elif actual == expected["$ne"]:
                    return False
            elif isinstance(actual, list) and not isinstance(expected, list):
                if expected not in actual:
                    return False
            elif actual != expected:
                return False
        return True

    def _eval(self, expr, this=None):
        if isinstance(expr, str) and expr == "$$this":
            return this
        if isinstance(expr, str) and expr.startswith("$"):
            return self.doc.get(expr[1:])
        if isinstance(expr, dict):
            (op, args), = expr.items()
            if op == "$filter":
                items = self._eval(args["input"]) or []
                return [item for item in items if self._eval(args["cond"], this=item)]
            values = [self._eval(arg, this) for arg in args]
            if op == "$ne":
                return values[0] != values[1]
            if op == "$max":
                return max(values)
            if op == "$subtract":
                return values[0] - values[1]
            if op == "$ifNull":
                return values[0] if values[0] is not None else values[1]
            raise NotImplementedError(op)
        return expr

    async def find_one(self, query):
        return copy.deepcopy(self.doc) if self._matches(query) else None

    async def find_one_and_update(self, query, update, return_document=None):
        if not self._matches(query):
            return None
        if isinstance(update, list):
            for stage in update:
                computed = {field: self._eval(expr) for field, expr in stage["$set"].items()}
                self.doc.update(computed)
        else:
            for field, value in update.get("$addToSet", {}).items():
                values = self.doc.setdefault(field, [])
                if value not in values:
                    values.append(value)
            for field, amount in update.get("$inc", {}).items():
                self.doc[field] = self.doc.get(field, 0) + amount
            self.doc.update(update.get("$set", {}))
        return copy.deepcopy(self.doc)


class TestToggleLikeBehaviour:
    """Like state transitions applied to a stored document"""

    @pytest.mark.asyncio
    async def test_like_then_unlike_restores_original_state(self, review_doc, review_id):
        collection = InMemoryCollection(review_doc)
        repository = ReviewRepository(collection)

        liked, review = await repository.toggle_like(review_id, 7)
        assert liked is True
        assert review.likes == 2
        assert review.liked_by == [9, 7]

        liked, review = await repository.toggle_like(review_id, 7)
        assert liked is False
        assert review.likes == review_doc["likes"]
        assert review.liked_by == review_doc["liked_by"]

    @pytest.mark.asyncio
    async def test_unlike_never_goes_below_zero(self, review_doc, review_id):
        collection = InMemoryCollection({**review_doc, "likes": 0, "liked_by": [7]})
        repository = ReviewRepository(collection)

        liked, review = await repository.toggle_like(review_id, 7)

        assert liked is False
        assert review.likes == 0
        assert review.liked_by == []
        assert collection.doc["likes"] == 0

    @pytest.mark.asyncio
    async def test_unlike_with_missing_likes_field(self, review_doc, review_id):
        doc = {**review_doc, "liked_by": [7]}
        del doc["likes"]
        repository = ReviewRepository(InMemoryCollection(doc))

        liked, review = await repository.toggle_like(review_id, 7)

        assert liked is False
        assert review.likes == 0

    @pytest.mark.asyncio
    async def test_deleted_review_cannot_be_liked(self, review_doc, review_id):
        collection = InMemoryCollection({**review_doc, "is_deleted": True})

        assert await ReviewRepository(collection).toggle_like(review_id, 7) is None
        assert collection.doc["likes"] == 1


class TestGroupRatings:

    @pytest.mark.asyncio
    async def test_pipeline_for_one_restaurant(self, repository, mock_collection, make_cursor):
        rows = [{"_id": 42, "average_rating": 4.0, "review_count": 3}]
        mock_collection.aggregate.return_value = make_cursor(rows)

        result = await repository.group_ratings(42)

        assert result == rows
        pipeline = mock_collection.aggregate.call_args[0][0]
        assert pipeline[0] == {"$match": {"is_deleted": {"$ne": True}, "restaurant_id": 42}}
        assert pipeline[1]["$group"]["_id"] == "$restaurant_id"
        assert pipeline[1]["$group"]["average_rating"] == {"$avg": "$rating"}

    @pytest.mark.asyncio
    async def test_pipeline_for_all_restaurants(self, repository, mock_collection, make_cursor):
        mock_collection.aggregate.return_value = make_cursor([])

        await repository.group_ratings()

        pipeline = mock_collection.aggregate.call_args[0][0]
        assert pipeline[0] == {"$match": {"is_deleted": {"$ne": True}}}

    @pytest.mark.asyncio
    async def test_driver_error(self, repository, mock_collection):
        cursor = MagicMock()
        cursor.to_list = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
        mock_collection.aggregate.return_value = cursor

        with pytest.raises(StoreUnavailable):
            await repository.group_ratings()
