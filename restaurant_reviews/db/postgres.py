"""
PostgreSQL connection management for the relational store (restaurants, users)
"""

from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from restaurant_reviews.core.config import config
from restaurant_reviews.core.errors import StoreUnavailable
from restaurant_reviews.core.logger import logger

# asyncpg raises OSError (e.g. ConnectionRefusedError) unwrapped when the server is unreachable
RELATIONAL_ERRORS = (SQLAlchemyError, OSError)


class RelationalDatabase:
    """Engine and session factory holder"""

    engine: Optional[AsyncEngine] = None
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None


pg = RelationalDatabase()


async def connect_to_postgres():
    """Create the async engine and verify connectivity"""
    logger.info("Connecting to PostgreSQL...")

    try:
        pg.engine = create_async_engine(
            config.postgres_url,
            pool_size=config.postgres_pool_size,
            pool_pre_ping=True,
        )
        pg.session_factory = async_sessionmaker(pg.engine, expire_on_commit=False)

        async with pg.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        logger.info(
            f"Successfully connected to PostgreSQL database '{config.postgres_database}'",
            metadata={
                "event": "postgres_connected",
                "database": config.postgres_database,
                "host": config.postgres_host,
                "port": config.postgres_port
            }
        )
    except RELATIONAL_ERRORS as e:
        logger.error(
            f"Could not connect to PostgreSQL: {e}",
            metadata={"event": "postgres_connection_error", "error": str(e)}
        )
        raise StoreUnavailable("restaurants", f"Could not connect to PostgreSQL: {e}")


async def close_postgres_connection():
    """Dispose of the engine's connection pool"""
    logger.info("Closing connection to PostgreSQL...")
    if pg.engine is not None:
        await pg.engine.dispose()
    pg.engine = None
    pg.session_factory = None


async def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory, connecting lazily"""
    if pg.session_factory is None:
        await connect_to_postgres()
    return pg.session_factory
