"""
Review document model and the rating aggregate value object
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now():
    """Helper function for Pydantic default_factory to get current UTC time"""
    return datetime.now(timezone.utc)


class ReviewRecord(BaseModel):
    """
    A review as stored in the document store.

    user_id and restaurant_id reference relational rows but are not enforced,
    so either may dangle.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    user_id: int
    restaurant_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    images: List[str] = []
    likes: int = Field(default=0, ge=0)
    liked_by: List[int] = []
    helpful_count: int = Field(default=0, ge=0)
    is_deleted: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v

    @classmethod
    def from_document(cls, doc: dict) -> "ReviewRecord":
        """Build a record from a raw MongoDB document"""
        data = dict(doc)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        data["likes"] = max(0, data.get("likes") or 0)
        data["liked_by"] = data.get("liked_by") or []
        data["is_deleted"] = bool(data.get("is_deleted", False))
        return cls(**data)

    def to_document(self) -> dict:
        """Serialize for insertion; the id is assigned by MongoDB"""
        return self.model_dump(exclude={"id"})


class RatingAggregate(BaseModel):
    """Average rating and count over a restaurant's non-deleted reviews"""

    model_config = ConfigDict(frozen=True)

    average_rating: float = Field(default=0.0, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)

    @classmethod
    def empty(cls) -> "RatingAggregate":
        return cls(average_rating=0.0, review_count=0)
