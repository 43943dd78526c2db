"""
API routers
"""

from . import admin, health, reviews, users

__all__ = ["admin", "health", "reviews", "users"]
