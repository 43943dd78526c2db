"""
Services module initialization
"""

from .aggregation import AggregationEngine
from .consistency_sync import ConsistencySync
from .mutation_trigger import MutationTrigger
from .pending_updates import PendingUpdate, PendingUpdateCache
from .rating import RatingService
from .reconciliation import ReconciliationJob
from .review import ReviewService

__all__ = [
    "AggregationEngine",
    "ConsistencySync",
    "MutationTrigger",
    "PendingUpdate",
    "PendingUpdateCache",
    "RatingService",
    "ReconciliationJob",
    "ReviewService",
]
