from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_, or_
from typing import Optional
from hirely.database import get_db
from hirely.models import Job, JobInterest, JobApplication, User
from hirely.models.job import APPLICATION_ASSIGNED
from hirely.schemas import (
    JobCreate,
    JobResponse,
    JobCreatedResponse,
    JobListItem,
    JobListResponse,
    JobDetailResponse,
    InterestResponse,
    InterestedUser,
    AssignRequest,
    AssignmentResponse,
    AssignResponse,
    UnassignResponse,
    JobStatusResponse,
    JobDeletedResponse,
)
from hirely.auth import Identity, get_current_identity, get_optional_identity
from hirely.errors import NotFound
from hirely.services import lifecycle
from hirely.services.queries import (
    job_listing_query,
    job_row_to_dict,
    rating_columns,
    user_row_to_dict,
)

router = APIRouter()


@router.post("", response_model=JobCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    payload: JobCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    job = Job(**payload.model_dump(), posted_by_user_id=identity.id)
    db.add(job)
    await db.commit()
    await db.refresh(job)

    return JobCreatedResponse(
        message="Job posted successfully!",
        job=JobResponse.model_validate(job),
    )


@router.get("", response_model=JobListResponse)
async def list_jobs(
    category: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    min_pay: Optional[float] = Query(None, alias="minPay"),
    max_pay: Optional[float] = Query(None, alias="maxPay"),
    keywords: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_optional_identity),
):
    filters = [Job.deleted_at.is_(None)]

    if category:
        filters.append(Job.category.ilike(f"%{category}%"))

    if location:
        filters.append(Job.location.ilike(f"%{location}%"))

    if min_pay is not None:
        filters.append(Job.pay >= min_pay)

    if max_pay is not None:
        filters.append(Job.pay <= max_pay)

    if keywords:
        filters.append(
            or_(Job.title.ilike(f"%{keywords}%"), Job.description.ilike(f"%{keywords}%"))
        )

    total_result = await db.execute(select(func.count(Job.id)).where(*filters))
    total = total_result.scalar() or 0

    query = (
        job_listing_query(identity.id if identity else None)
        .where(*filters)
        .order_by(Job.created_at.desc(), Job.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    result = await db.execute(query)

    return JobListResponse(
        jobs=[JobListItem.model_validate(job_row_to_dict(row)) for row in result.all()],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(
    job_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_optional_identity),
):
    current_user_id = identity.id if identity else None
    result = await db.execute(
        job_listing_query(current_user_id).where(Job.id == job_id, Job.deleted_at.is_(None))
    )
    row = result.first()
    if row is None:
        raise NotFound("Job not found or deleted.")

    assignment = None
    if current_user_id is not None:
        assigned_result = await db.execute(
            select(JobApplication).where(
                JobApplication.job_id == job_id,
                JobApplication.applicant_user_id == current_user_id,
                JobApplication.status == APPLICATION_ASSIGNED,
            )
        )
        assignment = assigned_result.scalar_one_or_none()

    is_poster = current_user_id is not None and row._mapping[Job].posted_by_user_id == current_user_id
    data = job_row_to_dict(row, include_private=is_poster or assignment is not None)

    if assignment is not None:
        data["assigned_location_for_user"] = assignment.assigned_location
        data["assigned_details_for_user"] = assignment.assigned_details
        data["assigned_image_urls_for_user"] = assignment.assigned_image_urls

    return JobDetailResponse.model_validate(data)


@router.delete("/{job_id}", response_model=JobDeletedResponse)
async def delete_job(
    job_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    job = await lifecycle.soft_delete(db, job_id, identity.id)
    return {
        "message": "Job successfully deleted (moved to trash).",
        "job": {"id": job.id, "deleted_at": job.deleted_at},
    }


# ==================== Interest ====================

@router.post("/{job_id}/interest", response_model=InterestResponse)
async def express_interest(
    job_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    summary = await lifecycle.express_interest(db, job_id, identity.id)
    return InterestResponse(
        message="Interest recorded successfully!",
        job_id=summary.job_id,
        interested_count=summary.interested_count,
        is_interested=summary.is_interested,
    )


@router.delete("/{job_id}/interest", response_model=InterestResponse)
async def withdraw_interest(
    job_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    summary = await lifecycle.withdraw_interest(db, job_id, identity.id)
    return InterestResponse(
        message="Interest removed successfully!",
        job_id=summary.job_id,
        interested_count=summary.interested_count,
        is_interested=summary.is_interested,
    )


@router.get("/{job_id}/interested-users", response_model=list[InterestedUser])
async def list_interested_users(
    job_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    job = await lifecycle.get_live_job(db, job_id)
    lifecycle.ensure_poster(job, identity.id, "view interested users for")

    query = (
        select(
            User,
            *rating_columns(User.id),
            JobApplication.status.label("application_status"),
        )
        .select_from(JobInterest)
        .join(User, JobInterest.user_id == User.id)
        .outerjoin(
            JobApplication,
            and_(
                JobApplication.job_id == JobInterest.job_id,
                JobApplication.applicant_user_id == JobInterest.user_id,
            ),
        )
        .where(JobInterest.job_id == job_id)
        .order_by(JobInterest.created_at.desc(), JobInterest.id.desc())
    )
    result = await db.execute(query)
    return [InterestedUser.model_validate(user_row_to_dict(row)) for row in result.all()]


# ==================== Filled ====================

@router.put("/{job_id}/mark-filled", response_model=JobStatusResponse)
async def mark_filled(
    job_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    job = await lifecycle.mark_filled(db, job_id, identity.id)
    return {
        "message": "Job marked as filled successfully!",
        "job": {"id": job.id, "status": job.status},
    }


@router.put("/{job_id}/undo-filled", response_model=JobStatusResponse)
async def undo_mark_filled(
    job_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    job = await lifecycle.undo_mark_filled(db, job_id, identity.id)
    return {
        "message": f"Job status reverted to '{job.status}' successfully!",
        "job": {"id": job.id, "status": job.status},
    }


# ==================== Assignment ====================

@router.post("/{job_id}/assign", response_model=AssignResponse)
async def assign_job(
    job_id: int,
    payload: AssignRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    application, job_status = await lifecycle.assign(
        db,
        job_id,
        employer_id=identity.id,
        worker_id=payload.assigned_user_id,
        assigned_location=payload.assigned_location,
        assigned_details=payload.assigned_details,
        assigned_image_urls=payload.assigned_image_urls,
    )
    return AssignResponse(
        message="Job assigned successfully!",
        assignment=AssignmentResponse.model_validate(application),
        job_status=job_status,
    )


@router.delete("/{job_id}/assign/{worker_id}", response_model=UnassignResponse)
async def unassign_job(
    job_id: int,
    worker_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    job_status = await lifecycle.unassign(db, job_id, identity.id, worker_id)
    return UnassignResponse(
        message="Job unassigned successfully!",
        job_id=job_id,
        unassigned_user_id=worker_id,
        job_status=job_status,
    )
