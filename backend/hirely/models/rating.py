from sqlalchemy import Column, Integer, Text, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from hirely.database import Base


class UserRating(Base):
    """One rating per (rated, rater) pair; re-rating overwrites."""

    __tablename__ = "user_ratings"
    __table_args__ = (
        UniqueConstraint("rated_user_id", "rater_user_id", name="uq_user_rating"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    rated_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rater_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class UserReport(Base):
    __tablename__ = "user_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reported_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    reporter_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    reason = Column(String(500), nullable=False)
    details = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
