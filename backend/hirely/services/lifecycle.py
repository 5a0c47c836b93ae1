"""
Job Lifecycle Engine - status transitions, interest and assignments

The rules for how a Job moves between states, and how its interest and
assignment rows are kept consistent with that state.

State Machine:
    open ──assign──▶ assigned ──unassign (last one)──▶ open
    open/assigned ──mark_filled──▶ filled ──undo_mark_filled──▶ open/assigned
    open/assigned ──soft_delete──▶ deleted (terminal, deleted_at set)

Rules:
    - Only the poster may assign, mark filled, undo filled or delete.
    - unassign is allowed for the poster or for the assigned worker
      cancelling their own assignment.
    - A filled job cannot be assigned or deleted until undo_mark_filled.
    - Soft-deleted jobs behave as missing for every operation here.
    - Interest rows never change Job.status.

Every operation runs inside one transaction() block, so the multi-step
ones (soft delete + application cascade, unassign + status recompute)
either land completely or not at all. Job.status for non-filled jobs is
always derived by recompute_status(); no operation writes "open" or
"assigned" by hand.

Known race: express_interest checks for an existing row before it
inserts. Two concurrent calls can both pass the check; the store's
unique constraint rejects the second insert and it is reported as
Conflict, the same as the check failing. A first assign of a worker
racing another first assign of that worker is retried once as an update
instead, so the later payload wins.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import select, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hirely.database import transaction
from hirely.errors import Conflict, Forbidden, InternalError, NotFound, ValidationError
from hirely.middleware.metrics import record_transition
from hirely.models import Job, JobInterest, JobApplication, User
from hirely.models.job import (
    JOB_OPEN,
    JOB_ASSIGNED,
    JOB_FILLED,
    APPLICATION_ASSIGNED,
    APPLICATION_JOB_DELETED,
    LIVE_APPLICATION_STATUSES,
)

logger = logging.getLogger(__name__)


@dataclass
class InterestSummary:
    job_id: int
    interested_count: int
    is_interested: bool


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ==================== Lookups & Guards ====================

async def get_live_job(db: AsyncSession, job_id: int) -> Job:
    """Load a job that exists and has not been soft-deleted."""
    result = await db.execute(
        select(Job).where(Job.id == job_id, Job.deleted_at.is_(None))
    )
    job = result.scalar_one_or_none()
    if job is None:
        raise NotFound("Job not found or deleted.")
    return job


def ensure_poster(job: Job, caller_id: int, action: str) -> None:
    if job.posted_by_user_id != caller_id:
        raise Forbidden(f"Unauthorized: You can only {action} your own jobs.")


def ensure_not_filled(job: Job, message: str) -> None:
    if job.status == JOB_FILLED:
        raise ValidationError(message)


async def has_any_assignment(db: AsyncSession, job_id: int) -> bool:
    result = await db.execute(
        select(JobApplication.id)
        .where(
            JobApplication.job_id == job_id,
            JobApplication.status == APPLICATION_ASSIGNED,
        )
        .limit(1)
    )
    return result.first() is not None


async def derive_status(db: AsyncSession, job_id: int) -> str:
    """Status a non-filled job should have given its active assignments."""
    await db.flush()
    return JOB_ASSIGNED if await has_any_assignment(db, job_id) else JOB_OPEN


async def recompute_status(db: AsyncSession, job: Job) -> str:
    """
    Bring Job.status in line with its assignments.

    Filled is a poster-declared state and is left untouched; every other
    job becomes "assigned" while at least one assignment is active and
    "open" otherwise.

    Returns:
        The job's status after reconciliation
    """
    if job.status == JOB_FILLED:
        return job.status

    new_status = await derive_status(db, job.id)
    if job.status != new_status:
        logger.info(f"Job {job.id} status {job.status} -> {new_status}")
        job.status = new_status
    return job.status


async def interest_summary(
    db: AsyncSession,
    job_id: int,
    user_id: Optional[int] = None,
) -> InterestSummary:
    count_result = await db.execute(
        select(func.count(JobInterest.id)).where(JobInterest.job_id == job_id)
    )
    interested_count = count_result.scalar() or 0

    is_interested = False
    if user_id is not None:
        mine = await db.execute(
            select(JobInterest.id).where(
                JobInterest.job_id == job_id,
                JobInterest.user_id == user_id,
            )
        )
        is_interested = mine.first() is not None

    return InterestSummary(
        job_id=job_id,
        interested_count=interested_count,
        is_interested=is_interested,
    )


# ==================== Interest ====================

async def express_interest(db: AsyncSession, job_id: int, user_id: int) -> InterestSummary:
    """
    Record that user_id is interested in job_id.

    Raises:
        NotFound: Job missing or deleted
        Conflict: Interest already recorded (including a concurrent insert)
    """
    async with transaction(db):
        await get_live_job(db, job_id)

        existing = await db.execute(
            select(JobInterest.id).where(
                JobInterest.job_id == job_id,
                JobInterest.user_id == user_id,
            )
        )
        if existing.first() is not None:
            raise Conflict("User already expressed interest in this job.")

        db.add(JobInterest(job_id=job_id, user_id=user_id))
        try:
            await db.flush()
        except IntegrityError:
            raise Conflict("User already expressed interest in this job.")

        summary = await interest_summary(db, job_id, user_id)

    record_transition("express_interest")
    logger.info(f"User {user_id} expressed interest in job {job_id}")
    return summary


async def withdraw_interest(db: AsyncSession, job_id: int, user_id: int) -> InterestSummary:
    """
    Remove user_id's interest in job_id.

    Raises:
        NotFound: No interest recorded for this user and job
    """
    async with transaction(db):
        result = await db.execute(
            select(JobInterest).where(
                JobInterest.job_id == job_id,
                JobInterest.user_id == user_id,
            )
        )
        interest = result.scalar_one_or_none()
        if interest is None:
            raise NotFound("Interest not found for this user and job.")

        await db.delete(interest)
        await db.flush()
        summary = await interest_summary(db, job_id, user_id)

    record_transition("withdraw_interest")
    logger.info(f"User {user_id} withdrew interest in job {job_id}")
    return summary


# ==================== Filled ====================

async def mark_filled(db: AsyncSession, job_id: int, caller_id: int) -> Job:
    async with transaction(db):
        job = await get_live_job(db, job_id)
        ensure_poster(job, caller_id, "mark")
        job.status = JOB_FILLED

    record_transition("mark_filled")
    logger.info(f"Job {job_id} marked as filled")
    return job


async def undo_mark_filled(db: AsyncSession, job_id: int, caller_id: int) -> Job:
    """
    Revert a filled job to whatever its assignments say it is.

    The previous status is not remembered; a job with an active
    assignment comes back as "assigned", otherwise "open".
    """
    async with transaction(db):
        job = await get_live_job(db, job_id)
        ensure_poster(job, caller_id, "undo mark as filled for")
        if job.status != JOB_FILLED:
            raise ValidationError("Job is not currently marked as filled.")

        job.status = await derive_status(db, job.id)

    record_transition("undo_mark_filled")
    logger.info(f"Job {job_id} status reverted from 'filled' to '{job.status}'")
    return job


# ==================== Soft Delete ====================

async def soft_delete(db: AsyncSession, job_id: int, caller_id: int) -> Job:
    """
    Hide a job from every listing and retire its live applications.

    Applications in assigned/interested/pending move to job_deleted in
    the same transaction as the deleted_at stamp. There is no undelete.
    """
    async with transaction(db):
        job = await get_live_job(db, job_id)
        ensure_poster(job, caller_id, "delete")
        ensure_not_filled(job, "Cannot delete a job that is already marked as filled.")

        now = utcnow()
        job.deleted_at = now
        await db.execute(
            update(JobApplication)
            .where(
                JobApplication.job_id == job_id,
                JobApplication.status.in_(LIVE_APPLICATION_STATUSES),
            )
            .values(status=APPLICATION_JOB_DELETED, updated_at=now)
            .execution_options(synchronize_session="fetch")
        )

    record_transition("soft_delete")
    logger.info(f"Job {job_id} soft-deleted by user {caller_id}")
    return job


# ==================== Assignment ====================

async def assign(
    db: AsyncSession,
    job_id: int,
    employer_id: int,
    worker_id: int,
    assigned_location: str,
    assigned_details: str,
    assigned_image_urls: Optional[List[str]] = None,
) -> Tuple[JobApplication, str]:
    """
    Assign worker_id to job_id, or refresh an existing assignment.

    The (job, worker) pair has at most one application row. Assigning the
    same worker again overwrites the location, details, images and
    assigned_at instead of adding a row. Several workers may be assigned
    to one job at the same time.

    Two first assigns of the same worker can both miss the existing row;
    the one whose insert hits the unique key rolls back and runs again,
    finds the row and overwrites it, so the last writer's payload wins.

    Returns:
        Tuple of (application, job status after the assignment)

    Raises:
        NotFound: Job missing/deleted, or worker does not exist
        Forbidden: Caller is not the poster
        ValidationError: Job is filled
        InternalError: The insert still violates the unique key after the retry
    """
    for attempt in range(2):
        try:
            async with transaction(db):
                job = await get_live_job(db, job_id)
                ensure_poster(job, employer_id, "assign")
                ensure_not_filled(job, "Job is already filled and cannot be assigned.")

                worker = await db.get(User, worker_id)
                if worker is None:
                    raise NotFound("User not found.")

                result = await db.execute(
                    select(JobApplication).where(
                        JobApplication.job_id == job_id,
                        JobApplication.applicant_user_id == worker_id,
                    )
                )
                application = result.scalar_one_or_none()
                if application is None:
                    application = JobApplication(job_id=job_id, applicant_user_id=worker_id)
                    db.add(application)

                application.status = APPLICATION_ASSIGNED
                application.assigned_location = assigned_location
                application.assigned_details = assigned_details
                application.assigned_image_urls = assigned_image_urls
                application.assigned_at = utcnow()
                await db.flush()

                job_status = await recompute_status(db, job)
            break
        except IntegrityError as e:
            # A concurrent first assign inserted the row; update it instead
            if attempt:
                raise InternalError("Assignment could not be saved.") from e
            logger.info(f"Job {job_id} assignment of user {worker_id} raced; retrying as update")

    record_transition("assign")
    logger.info(f"Job {job_id} assigned to user {worker_id}")
    return application, job_status


async def unassign(db: AsyncSession, job_id: int, acting_user_id: int, worker_id: int) -> str:
    """
    Remove worker_id's active assignment on job_id.

    When the last active assignment goes, an "assigned" job reverts to
    "open". A filled job stays filled.

    Returns:
        Job status after the unassignment

    Raises:
        NotFound: Job missing/deleted, or no active assignment for the worker
        Forbidden: Caller is neither the poster nor the worker themself
    """
    async with transaction(db):
        job = await get_live_job(db, job_id)

        is_poster = job.posted_by_user_id == acting_user_id
        is_self = worker_id == acting_user_id
        if not is_poster and not is_self:
            raise Forbidden(
                "Unauthorized: You can only unassign your own jobs or cancel your own assignment."
            )

        result = await db.execute(
            select(JobApplication).where(
                JobApplication.job_id == job_id,
                JobApplication.applicant_user_id == worker_id,
                JobApplication.status == APPLICATION_ASSIGNED,
            )
        )
        application = result.scalar_one_or_none()
        if application is None:
            raise NotFound("Assignment not found for this user and job.")

        await db.delete(application)
        job_status = await recompute_status(db, job)

    record_transition("unassign")
    logger.info(f"Job {job_id} unassigned from user {worker_id}")
    return job_status
