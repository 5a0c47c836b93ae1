import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from typing import Optional
from hirely.database import get_db
from hirely.models import Job, JobApplication, User, UserRating, UserReport
from hirely.models.job import APPLICATION_ASSIGNED
from hirely.schemas import (
    UserProfile,
    UserUpdate,
    RatingRequest,
    RatingResponse,
    ReportRequest,
    MyJobItem,
)
from hirely.auth import Identity, get_current_identity, get_optional_identity
from hirely.errors import Conflict, Forbidden, NotFound, ValidationError
from hirely.services.lifecycle import utcnow
from hirely.services.queries import (
    job_listing_query,
    job_row_to_dict,
    user_profile_query,
    user_row_to_dict,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_profile_or_404(
    db: AsyncSession,
    user_id: int,
    viewer_id: Optional[int] = None,
) -> UserProfile:
    result = await db.execute(user_profile_query(viewer_id).where(User.id == user_id))
    row = result.first()
    if row is None:
        raise NotFound("User not found.")
    return UserProfile.model_validate(user_row_to_dict(row))


async def ensure_user_exists(db: AsyncSession, user_id: int) -> None:
    if await db.get(User, user_id) is None:
        raise NotFound("User not found.")


def ensure_self(identity: Identity, user_id: int, message: str) -> None:
    if identity.id != user_id:
        raise Forbidden(message)


@router.get("", response_model=list[UserProfile])
async def search_users(
    keywords: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    query = user_profile_query()

    if keywords:
        query = query.where(
            or_(User.name.ilike(f"%{keywords}%"), User.email.ilike(f"%{keywords}%"))
        )

    if location:
        query = query.where(User.location.ilike(f"%{location}%"))

    if role:
        query = query.where(User.role.ilike(f"%{role}%"))

    result = await db.execute(query.order_by(User.name.asc()))
    return [UserProfile.model_validate(user_row_to_dict(row)) for row in result.all()]


@router.get("/id/{user_id}", response_model=UserProfile)
async def get_user_by_id(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_optional_identity),
):
    return await get_profile_or_404(db, user_id, identity.id if identity else None)


@router.get("/{email}", response_model=UserProfile)
async def get_user_by_email(email: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(user_profile_query().where(User.email == email))
    row = result.first()
    if row is None:
        raise NotFound("User not found.")
    return UserProfile.model_validate(user_row_to_dict(row))


@router.put("/{user_id}", response_model=UserProfile)
async def update_user(
    user_id: int,
    update: UserUpdate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    ensure_self(identity, user_id, "Unauthorized: You can only update your own profile.")

    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found.")

    for field, value in update.model_dump().items():
        setattr(user, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("This email is already in use by another account.")

    return await get_profile_or_404(db, user_id)


# ==================== Ratings & Reports ====================

@router.post("/{user_id}/rate", response_model=RatingResponse, status_code=status.HTTP_201_CREATED)
async def rate_user(
    user_id: int,
    payload: RatingRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    if user_id == identity.id:
        raise ValidationError("You cannot rate yourself.")
    await ensure_user_exists(db, user_id)

    # One rating per rater; rating again replaces the earlier one
    for attempt in range(2):
        result = await db.execute(
            select(UserRating).where(
                UserRating.rated_user_id == user_id,
                UserRating.rater_user_id == identity.id,
            )
        )
        rating = result.scalar_one_or_none()
        if rating is None:
            rating = UserRating(rated_user_id=user_id, rater_user_id=identity.id)
            db.add(rating)
        rating.rating = payload.rating
        rating.comment = payload.comment
        rating.created_at = utcnow()
        try:
            await db.commit()
            break
        except IntegrityError:
            # A concurrent first rating won the insert; update it instead
            await db.rollback()
            if attempt:
                raise

    stats = await db.execute(
        select(func.avg(UserRating.rating), func.count(UserRating.rating))
        .where(UserRating.rated_user_id == user_id)
    )
    average_rating, total_ratings_count = stats.one()

    return RatingResponse(
        message="Rating submitted successfully!",
        average_rating=float(average_rating),
        total_ratings_count=total_ratings_count,
    )


@router.post("/{user_id}/report", status_code=status.HTTP_201_CREATED)
async def report_user(
    user_id: int,
    payload: ReportRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    if user_id == identity.id:
        raise ValidationError("You cannot report yourself.")
    await ensure_user_exists(db, user_id)

    db.add(
        UserReport(
            reported_user_id=user_id,
            reporter_user_id=identity.id,
            reason=payload.reason,
            details=payload.details,
        )
    )
    await db.commit()

    logger.info(f"User {identity.id} reported user {user_id}")
    return {"message": "Report submitted successfully. Thank you for your feedback."}


# ==================== My Jobs ====================

@router.get("/{user_id}/my-jobs", response_model=list[MyJobItem])
async def get_my_jobs(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Jobs the user posted (not deleted) plus jobs they are assigned to."""
    ensure_self(identity, user_id, "Unauthorized: You can only view your own jobs.")

    posted_result = await db.execute(
        job_listing_query(user_id).where(
            Job.posted_by_user_id == user_id,
            Job.deleted_at.is_(None),
        )
    )
    my_jobs = []
    for row in posted_result.all():
        data = job_row_to_dict(row, include_private=True)
        data["job_type"] = "posted"
        my_jobs.append(data)

    assigned_result = await db.execute(
        job_listing_query(user_id)
        .join(JobApplication, JobApplication.job_id == Job.id)
        .add_columns(
            JobApplication.status.label("application_status"),
            JobApplication.assigned_location,
            JobApplication.assigned_details,
            JobApplication.assigned_image_urls,
            JobApplication.assigned_at,
        )
        .where(
            JobApplication.applicant_user_id == user_id,
            JobApplication.status == APPLICATION_ASSIGNED,
            Job.deleted_at.is_(None),
        )
    )
    for row in assigned_result.all():
        data = job_row_to_dict(row, include_private=True)
        data["job_type"] = "assigned_to_me"
        my_jobs.append(data)

    my_jobs.sort(key=lambda job: (job["created_at"] is not None, job["created_at"], job["id"]), reverse=True)
    return [MyJobItem.model_validate(job) for job in my_jobs]


@router.get("/{user_id}/deleted-jobs", response_model=list[MyJobItem])
async def get_deleted_jobs(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    ensure_self(identity, user_id, "Unauthorized: You can only view your own deleted jobs.")

    result = await db.execute(
        job_listing_query(user_id)
        .where(Job.posted_by_user_id == user_id, Job.deleted_at.is_not(None))
        .order_by(Job.deleted_at.desc(), Job.id.desc())
    )
    deleted_jobs = []
    for row in result.all():
        data = job_row_to_dict(row, include_private=True)
        data["job_type"] = "deleted"
        deleted_jobs.append(data)
    return [MyJobItem.model_validate(job) for job in deleted_jobs]
