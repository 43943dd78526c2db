"""
Models module initialization
"""

from .relational import Base, Restaurant, UserAccount
from .review import RatingAggregate, ReviewRecord
from .user import User

__all__ = [
    "Base",
    "Restaurant",
    "UserAccount",
    "RatingAggregate",
    "ReviewRecord",
    "User",
]
