"""
Error handling utilities following FastAPI best practices
"""

import traceback
from typing import Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from restaurant_reviews.core.config import config
from restaurant_reviews.core.logger import logger


class ErrorResponse(Exception):
    """Custom exception for application errors"""

    def __init__(self, message: str, status_code: int = 400, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class StoreUnavailable(ErrorResponse):
    """A backing store (reviews or restaurants) could not be reached"""

    def __init__(self, store: str, message: Optional[str] = None, details: dict = None):
        self.store = store
        super().__init__(
            message or f"{store} store is unavailable",
            status_code=503,
            details={"store": store, **(details or {})},
        )


class SyncFailed(ErrorResponse):
    """An aggregate was computed but could not be written to the restaurant row"""

    def __init__(self, restaurant_id: int, average_rating: float, review_count: int,
                 cause: Optional[Exception] = None):
        self.restaurant_id = restaurant_id
        self.average_rating = average_rating
        self.review_count = review_count
        details = {
            "restaurant_id": restaurant_id,
            "average_rating": average_rating,
            "review_count": review_count,
        }
        if cause is not None:
            details["cause"] = str(cause)
        super().__init__(
            f"Failed to sync rating stats for restaurant {restaurant_id}",
            status_code=500,
            details=details,
        )


class InvalidReference(ErrorResponse):
    """A review references a restaurant that does not exist in the relational store"""

    def __init__(self, restaurant_id: int):
        self.restaurant_id = restaurant_id
        super().__init__(
            f"Restaurant {restaurant_id} does not exist",
            status_code=404,
            details={"restaurant_id": restaurant_id},
        )


class ErrorResponseModel(BaseModel):
    """Pydantic model for error responses"""
    error: str
    details: Optional[dict] = None


async def error_response_handler(request: Request, exc: ErrorResponse):
    """Handler for custom ErrorResponse exceptions"""
    metadata = {
        "event": "error_response",
        "status_code": exc.status_code,
        "url": str(request.url),
        "method": request.method,
        **exc.details,
    }

    if config.environment == "development":
        metadata["traceback"] = traceback.format_exc()

    logger.error(f"Error: {exc.message}", metadata=metadata)

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details}
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handler for FastAPI HTTPException"""
    logger.warning(
        f"HTTPException: {exc.detail}",
        metadata={
            "event": "http_exception",
            "status_code": exc.status_code,
            "url": str(request.url),
            "method": request.method,
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )
