"""
Database module initialization
"""

from .mongodb import (
    db,
    connect_to_mongo,
    close_mongo_connection,
    ensure_review_indexes,
    get_review_collection,
)
from .postgres import (
    pg,
    connect_to_postgres,
    close_postgres_connection,
    get_session_factory,
)

__all__ = [
    "db",
    "connect_to_mongo",
    "close_mongo_connection",
    "ensure_review_indexes",
    "get_review_collection",
    "pg",
    "connect_to_postgres",
    "close_postgres_connection",
    "get_session_factory",
]
