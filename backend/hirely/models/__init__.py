from hirely.models.user import User
from hirely.models.job import Job, JobInterest, JobApplication
from hirely.models.rating import UserRating, UserReport
from hirely.models.message import Message

__all__ = [
    "User",
    "Job",
    "JobInterest",
    "JobApplication",
    "UserRating",
    "UserReport",
    "Message",
]
