"""
User Model - marketplace accounts (posters and workers alike)

Role is a free-form string ("job_seeker" by default); the API never
branches on it. Rating aggregates are derived from user_ratings at read
time and are not stored here.
"""

from sqlalchemy import Column, String, Integer, Float, DateTime
from sqlalchemy.sql import func
from hirely.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    location = Column(String(500), nullable=False)
    preferred_distance = Column(Integer, nullable=False, default=0)
    role = Column(String(50), nullable=False, default="job_seeker")
    avatar_url = Column(String(2000), nullable=True)
    total_jobs_worked = Column(Integer, nullable=False, default=0)
    total_hours_worked = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
