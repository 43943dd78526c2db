"""
API schemas for pending profile-update notifications
"""

from datetime import datetime
from typing import Any, Dict
from pydantic import BaseModel, Field


class PendingUpdateCreate(BaseModel):
    """Profile fields an admin changed and the user should be told about"""
    data: Dict[str, Any] = Field(..., min_length=1)


class PendingUpdateResponse(BaseModel):
    user_id: int
    data: Dict[str, Any]
    staged_at: datetime
