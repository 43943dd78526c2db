"""
Schemas module initialization
"""

from .rating import ReconciliationReport, SyncReport
from .review import (
    LikeToggleResponse,
    RatingStatsResponse,
    ReviewAuthor,
    ReviewCreate,
    ReviewMutationResponse,
    ReviewResponse,
    ReviewUpdate,
)
from .user import PendingUpdateCreate, PendingUpdateResponse

__all__ = [
    "ReconciliationReport",
    "SyncReport",
    "LikeToggleResponse",
    "RatingStatsResponse",
    "ReviewAuthor",
    "ReviewCreate",
    "ReviewMutationResponse",
    "ReviewResponse",
    "ReviewUpdate",
    "PendingUpdateCreate",
    "PendingUpdateResponse",
]
