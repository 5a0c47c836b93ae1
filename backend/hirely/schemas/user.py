from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional


class UserPublic(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    location: str
    preferred_distance: int = 0
    role: str
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class UserProfile(UserPublic):
    average_rating: Optional[float] = None
    total_ratings_count: int = 0
    total_jobs_worked: int = 0
    total_hours_worked: float = 0.0
    my_rating: Optional[int] = None
    created_at: Optional[datetime] = None


class UserUpdate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    location: str = Field(..., min_length=1)
    phone: Optional[str] = None
    preferred_distance: int = Field(0, ge=0)
    avatar_url: Optional[str] = None


class RatingRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class RatingResponse(BaseModel):
    message: str
    average_rating: float
    total_ratings_count: int


class ReportRequest(BaseModel):
    reason: str
    details: Optional[str] = None

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Report reason is required")
        return v


class InterestedUser(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    location: str
    avatar_url: Optional[str] = None
    average_rating: Optional[float] = None
    total_ratings_count: int = 0
    total_jobs_worked: int = 0
    total_hours_worked: float = 0.0
    application_status: Optional[str] = None
