"""
Core module initialization
"""

from .config import config
from .errors import (
    ErrorResponse,
    ErrorResponseModel,
    InvalidReference,
    StoreUnavailable,
    SyncFailed,
)
from .logger import logger

__all__ = [
    "config",
    "ErrorResponse",
    "ErrorResponseModel",
    "InvalidReference",
    "StoreUnavailable",
    "SyncFailed",
    "logger",
]
