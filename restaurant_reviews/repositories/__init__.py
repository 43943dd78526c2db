"""
Repositories module initialization
"""

from .restaurant import RestaurantRepository
from .review import ReviewRepository
from .user import UserRepository

__all__ = [
    "RestaurantRepository",
    "ReviewRepository",
    "UserRepository",
]
