"""
Dependencies module initialization
"""

from .auth import get_current_user, require_admin
from .services import (
    build_rating_service,
    get_pending_update_cache,
    get_rating_service,
    get_review_service,
)

__all__ = [
    "get_current_user",
    "require_admin",
    "build_rating_service",
    "get_pending_update_cache",
    "get_rating_service",
    "get_review_service",
]
