"""
User repository: read-only profile lookups used to decorate reviews
"""

from typing import Dict, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from restaurant_reviews.core.errors import StoreUnavailable
from restaurant_reviews.core.logger import logger
from restaurant_reviews.db.postgres import RELATIONAL_ERRORS
from restaurant_reviews.models.relational import UserAccount
from restaurant_reviews.schemas.review import ReviewAuthor


class UserRepository:
    """Repository for user profile reads"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_authors(self, user_ids: Iterable[int]) -> Dict[int, ReviewAuthor]:
        """Profiles keyed by id; ids with no row are simply absent"""
        ids = set(user_ids)
        if not ids:
            return {}
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(UserAccount.id, UserAccount.username, UserAccount.profile_picture_url)
                    .where(UserAccount.id.in_(ids))
                )
                return {
                    row.id: ReviewAuthor(
                        id=row.id,
                        username=row.username,
                        profile_image=row.profile_picture_url,
                    )
                    for row in result
                }
        except RELATIONAL_ERRORS as e:
            logger.error(
                f"PostgreSQL error during user lookup: {e}",
                metadata={"event": "user_store_error", "error": str(e)}
            )
            raise StoreUnavailable("users", "Database error during user lookup")
