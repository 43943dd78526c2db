"""
API schemas for review endpoints
"""

from typing import List, Optional, Union
from pydantic import BaseModel, Field

from restaurant_reviews.models.review import ReviewRecord


class ReviewCreate(BaseModel):
    """Schema for submitting a review; the author comes from the caller identity"""
    restaurant_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=5000)
    images: List[str] = []


class ReviewUpdate(BaseModel):
    """Schema for an admin edit of an existing review"""
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=5000)
    images: Optional[List[str]] = None
    likes: Optional[int] = Field(None, ge=0)
    helpful_count: Optional[int] = Field(None, ge=0)


class ReviewAuthor(BaseModel):
    id: int = 0
    username: str = "Anonymous"
    profile_image: Optional[str] = None


class ReviewResponse(ReviewRecord):
    """Review with author details resolved from the relational store"""
    id: str
    username: str = "Anonymous"
    user_details: ReviewAuthor = ReviewAuthor()
    restaurant_name: Optional[str] = None


class ReviewMutationResponse(BaseModel):
    message: str
    review: Optional[ReviewRecord] = None


class LikeToggleResponse(BaseModel):
    liked: bool
    likes: int


class RatingStatsResponse(BaseModel):
    """Live rating stats computed from the review documents"""
    restaurant_id: Union[int, str]
    average_rating: float
    review_count: int
