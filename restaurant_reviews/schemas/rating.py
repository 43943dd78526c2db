"""
Schemas describing aggregate sync and reconciliation outcomes
"""

from typing import List
from pydantic import BaseModel


class SyncReport(BaseModel):
    """Per-row outcome of a bulk aggregate write"""
    updated: List[int] = []
    reset: List[int] = []
    skipped: List[int] = []
    failed: List[int] = []


class ReconciliationReport(BaseModel):
    """Result of a full recompute-and-rewrite pass over every restaurant"""
    message: str = "Restaurant statistics updated successfully"
    restaurants_updated: int = 0
    restaurants_with_reviews: int = 0
    restaurants_reset: int = 0
    restaurants_skipped: int = 0
    restaurants_failed: int = 0
    failed_restaurant_ids: List[int] = []
