from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime, timezone
from typing import Optional


class JobBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1)
    pay: float = Field(..., gt=0)
    pay_type: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    start_time: datetime
    end_time: datetime
    total_hours: float = Field(..., gt=0)
    location: str = Field(..., min_length=1)


class JobCreate(JobBase):
    private_details: Optional[str] = None
    private_image_urls: Optional[list[str]] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def to_naive_utc(cls, v: datetime) -> datetime:
        # Columns store naive UTC
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @model_validator(mode="after")
    def end_after_start(self) -> "JobCreate":
        if self.start_time >= self.end_time:
            raise ValueError("End time must be after start time")
        return self


class JobResponse(JobBase):
    id: int
    posted_by_user_id: int
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JobCreatedResponse(BaseModel):
    message: str
    job: JobResponse


class JobListItem(JobResponse):
    posted_by_name: str
    posted_by_avatar: Optional[str] = None
    posted_by_email: str
    posted_by_phone: Optional[str] = None
    interested_count: int = 0
    is_interested_by_current_user: bool = False
    has_any_assignment: bool = False


class JobListResponse(BaseModel):
    jobs: list[JobListItem]
    total: int
    page: int
    per_page: int


class JobDetailResponse(JobListItem):
    # Poster and currently assigned workers only
    private_details: Optional[str] = None
    private_image_urls: Optional[list[str]] = None
    # Worker currently assigned to this job only
    assigned_location_for_user: Optional[str] = None
    assigned_details_for_user: Optional[str] = None
    assigned_image_urls_for_user: Optional[list[str]] = None


class MyJobItem(JobListItem):
    job_type: str  # "posted", "assigned_to_me" or "deleted"
    deleted_at: Optional[datetime] = None
    application_status: Optional[str] = None
    assigned_location: Optional[str] = None
    assigned_details: Optional[str] = None
    assigned_image_urls: Optional[list[str]] = None
    assigned_at: Optional[datetime] = None


class InterestResponse(BaseModel):
    message: str
    job_id: int = Field(..., alias="jobId")
    interested_count: int = Field(..., alias="interestedCount")
    is_interested: bool = Field(..., alias="isInterested")

    class Config:
        populate_by_name = True


class AssignRequest(BaseModel):
    assigned_user_id: int
    assigned_location: str = Field(..., min_length=1)
    assigned_details: str = Field(..., min_length=1)
    assigned_image_urls: Optional[list[str]] = None


class AssignmentResponse(BaseModel):
    id: int
    job_id: int
    applicant_user_id: int
    status: str
    assigned_location: Optional[str] = None
    assigned_details: Optional[str] = None
    assigned_image_urls: Optional[list[str]] = None
    assigned_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AssignResponse(BaseModel):
    message: str
    assignment: AssignmentResponse
    job_status: str = Field(..., alias="jobStatus")

    class Config:
        populate_by_name = True


class UnassignResponse(BaseModel):
    message: str
    job_id: int = Field(..., alias="jobId")
    unassigned_user_id: int = Field(..., alias="unassignedUserId")
    job_status: str = Field(..., alias="jobStatus")

    class Config:
        populate_by_name = True


class JobStatus(BaseModel):
    id: int
    status: str


class JobStatusResponse(BaseModel):
    message: str
    job: JobStatus


class JobDeleted(BaseModel):
    id: int
    deleted_at: datetime


class JobDeletedResponse(BaseModel):
    message: str
    job: JobDeleted
