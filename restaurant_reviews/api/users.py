"""
User API endpoints for pending profile-update notifications
"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from restaurant_reviews.dependencies.auth import get_current_user
from restaurant_reviews.dependencies.services import get_pending_update_cache
from restaurant_reviews.models.user import User
from restaurant_reviews.schemas.user import PendingUpdateResponse
from restaurant_reviews.services.pending_updates import PendingUpdateCache

router = APIRouter()


@router.get("/me/pending-updates", response_model=Optional[PendingUpdateResponse])
async def get_pending_updates(
    user: User = Depends(get_current_user),
    cache: PendingUpdateCache = Depends(get_pending_update_cache),
):
    entry = cache.get(user.id)
    if entry is None:
        return None
    return PendingUpdateResponse(user_id=entry.user_id, data=entry.data, staged_at=entry.staged_at)


@router.delete("/me/pending-updates", status_code=status.HTTP_204_NO_CONTENT)
async def acknowledge_pending_updates(
    user: User = Depends(get_current_user),
    cache: PendingUpdateCache = Depends(get_pending_update_cache),
):
    cache.acknowledge(user.id)
