"""
Read-side query builders shared by the job and user routes.

Listing rows carry the poster's contact columns plus three derived
columns computed in the same SELECT:
    interested_count               - rows in job_interests for the job
    is_interested_by_current_user  - caller has an interest row (False if anonymous)
    has_any_assignment             - at least one application is "assigned"

User rows carry the rating aggregate (average_rating, total_ratings_count)
and, when a viewer is known, the viewer's own rating (my_rating).
"""

from typing import Any, Dict, Optional

from sqlalchemy import select, func, exists, literal, Select
from sqlalchemy.engine import Row
from sqlalchemy.orm import aliased

from hirely.models import Job, JobInterest, JobApplication, User, UserRating
from hirely.models.job import APPLICATION_ASSIGNED

PRIVATE_JOB_FIELDS = ("private_details", "private_image_urls")


def job_listing_query(current_user_id: Optional[int] = None) -> Select:
    # Aliased so callers can join JobApplication/JobInterest without
    # the subqueries correlating to the joined rows
    interest = aliased(JobInterest)
    application = aliased(JobApplication)

    interested_count = (
        select(func.count(interest.id))
        .where(interest.job_id == Job.id)
        .correlate(Job)
        .scalar_subquery()
    )

    if current_user_id is not None:
        is_interested = exists().where(
            interest.job_id == Job.id,
            interest.user_id == current_user_id,
        )
    else:
        is_interested = literal(False)

    has_any_assignment = exists().where(
        application.job_id == Job.id,
        application.status == APPLICATION_ASSIGNED,
    )

    return (
        select(
            Job,
            User.name.label("posted_by_name"),
            User.avatar_url.label("posted_by_avatar"),
            User.email.label("posted_by_email"),
            User.phone.label("posted_by_phone"),
            interested_count.label("interested_count"),
            is_interested.label("is_interested_by_current_user"),
            has_any_assignment.label("has_any_assignment"),
        )
        .join(User, Job.posted_by_user_id == User.id)
    )


def job_row_to_dict(row: Row, include_private: bool = False) -> Dict[str, Any]:
    """
    Flatten a job_listing_query row into a plain dict.

    Private fields are blanked unless include_private is set.
    """
    mapping = row._mapping
    job = mapping[Job]
    data = {column.name: getattr(job, column.name) for column in Job.__table__.columns}
    if not include_private:
        for field in PRIVATE_JOB_FIELDS:
            data[field] = None

    for key, value in mapping.items():
        if isinstance(key, str) and key != "Job":
            data[key] = value

    data["interested_count"] = int(data.get("interested_count") or 0)
    data["is_interested_by_current_user"] = bool(data.get("is_interested_by_current_user"))
    data["has_any_assignment"] = bool(data.get("has_any_assignment"))
    return data


def rating_columns(user_id_column, viewer_id: Optional[int] = None) -> list:
    average_rating = (
        select(func.avg(UserRating.rating))
        .where(UserRating.rated_user_id == user_id_column)
        .scalar_subquery()
    )
    total_ratings_count = (
        select(func.count(UserRating.rating))
        .where(UserRating.rated_user_id == user_id_column)
        .scalar_subquery()
    )
    columns = [
        average_rating.label("average_rating"),
        total_ratings_count.label("total_ratings_count"),
    ]
    if viewer_id is not None:
        my_rating = (
            select(UserRating.rating)
            .where(
                UserRating.rated_user_id == user_id_column,
                UserRating.rater_user_id == viewer_id,
            )
            .scalar_subquery()
        )
        columns.append(my_rating.label("my_rating"))
    return columns


def user_profile_query(viewer_id: Optional[int] = None) -> Select:
    return select(User, *rating_columns(User.id, viewer_id))


def user_row_to_dict(row: Row) -> Dict[str, Any]:
    mapping = row._mapping
    user = mapping[User]
    data = {
        column.name: getattr(user, column.name)
        for column in User.__table__.columns
        if column.name != "password_hash"
    }
    for key, value in mapping.items():
        if isinstance(key, str) and key != "User":
            data[key] = value

    average = data.get("average_rating")
    data["average_rating"] = float(average) if average is not None else None
    data["total_ratings_count"] = int(data.get("total_ratings_count") or 0)
    return data
