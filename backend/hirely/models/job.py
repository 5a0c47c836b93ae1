"""
Job Models - postings, interest bookkeeping and assignments

Job Status Flow:
    open ⇄ assigned    (derived from active assignments)
    open/assigned → filled → open/assigned   (poster declared, reversible)
    any non-filled → soft-deleted            (deleted_at set, terminal)

JobInterest rows never change Job.status. JobApplication rows with
status "assigned" are what make a job "assigned"; soft-deleting a job
moves its live applications to "job_deleted".
"""

from sqlalchemy import (
    Column,
    String,
    Integer,
    Float,
    Text,
    DateTime,
    JSON,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from hirely.database import Base

JOB_OPEN = "open"
JOB_ASSIGNED = "assigned"
JOB_FILLED = "filled"

APPLICATION_ASSIGNED = "assigned"
APPLICATION_JOB_DELETED = "job_deleted"
# Application statuses moved to job_deleted when the parent job is deleted
LIVE_APPLICATION_STATUSES = ("assigned", "interested", "pending")


class Job(Base):
    """
    Job posting owned by its poster.

    Attributes:
        posted_by_user_id: Poster, immutable after creation
        status: open / assigned / filled
        private_details/private_image_urls: Visible to the poster and currently assigned workers
        deleted_at: Soft-delete marker; set means hidden from all listings
    """

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    posted_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=False)
    pay = Column(Float, nullable=False)
    pay_type = Column(String(50), nullable=False)
    category = Column(String(100), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    total_hours = Column(Float, nullable=False)
    location = Column(String(500), nullable=False)
    status = Column(String(20), nullable=False, default=JOB_OPEN, index=True)
    private_details = Column(Text, nullable=True)
    private_image_urls = Column(JSON, nullable=True)
    deleted_at = Column(DateTime, nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class JobInterest(Base):
    __tablename__ = "job_interests"
    __table_args__ = (UniqueConstraint("job_id", "user_id", name="uq_job_interest"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())


class JobApplication(Base):
    """Assignment record for one worker on one job, with private logistics."""

    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("job_id", "applicant_user_id", name="uq_job_application"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    applicant_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=APPLICATION_ASSIGNED, index=True)
    assigned_location = Column(String(500), nullable=True)
    assigned_details = Column(Text, nullable=True)
    assigned_image_urls = Column(JSON, nullable=True)
    assigned_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
