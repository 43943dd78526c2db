"""
Restaurant repository: the relational row's denormalized rating columns
"""

from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from restaurant_reviews.core.errors import StoreUnavailable
from restaurant_reviews.core.logger import logger
from restaurant_reviews.db.postgres import RELATIONAL_ERRORS
from restaurant_reviews.models.relational import Restaurant
from restaurant_reviews.models.review import RatingAggregate


class RestaurantRepository:
    """
    Targeted reads and writes against the restaurants table.

    Writes are last-write-wins: the schema has no version column.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @staticmethod
    def _unavailable(operation: str, error: Exception) -> StoreUnavailable:
        logger.error(
            f"PostgreSQL error during {operation}: {error}",
            metadata={"event": "restaurant_store_error", "operation": operation, "error": str(error)}
        )
        return StoreUnavailable("restaurants", f"Database error during {operation}")

    async def list_ids(self) -> List[int]:
        """Ids of every restaurant"""
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(Restaurant.id).order_by(Restaurant.id))
                return list(result.scalars().all())
        except RELATIONAL_ERRORS as e:
            raise self._unavailable("restaurant listing", e)

    async def get_names(self, restaurant_ids: Iterable[int]) -> Dict[int, str]:
        ids = set(restaurant_ids)
        if not ids:
            return {}
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(Restaurant.id, Restaurant.name).where(Restaurant.id.in_(ids))
                )
                return {row.id: row.name for row in result}
        except RELATIONAL_ERRORS as e:
            raise self._unavailable("restaurant name lookup", e)

    async def get_stored_aggregate(self, restaurant_id: int) -> Optional[RatingAggregate]:
        """The denormalized stats as currently stored, possibly stale"""
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(Restaurant.average_rating, Restaurant.review_count)
                    .where(Restaurant.id == restaurant_id)
                )
                row = result.first()
        except RELATIONAL_ERRORS as e:
            raise self._unavailable("restaurant stats read", e)
        if row is None:
            return None
        return RatingAggregate(average_rating=row.average_rating or 0.0, review_count=row.review_count or 0)

    async def update_aggregate(self, restaurant_id: int, average_rating: float, review_count: int) -> bool:
        """
        Overwrite average_rating, review_count and updated_at for one row.

        Returns False when no row has that id.
        """
        stmt = (
            update(Restaurant)
            .where(Restaurant.id == restaurant_id)
            .values(average_rating=average_rating, review_count=review_count, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                return result.rowcount > 0
        except RELATIONAL_ERRORS as e:
            raise self._unavailable("restaurant stats update", e)
