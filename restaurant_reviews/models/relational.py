"""
SQLAlchemy models for the relational store
"""

from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Denormalized rating stats, written only by ConsistencySync
    average_rating = Column(Float, nullable=False, server_default="0", default=0.0)
    review_count = Column(Integer, nullable=False, server_default="0", default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class UserAccount(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True)
    profile_picture_url = Column(Text, nullable=True)
