from hirely.schemas.auth import RegisterRequest, LoginRequest, AuthResponse
from hirely.schemas.user import (
    UserPublic,
    UserProfile,
    UserUpdate,
    RatingRequest,
    RatingResponse,
    ReportRequest,
    InterestedUser,
)
from hirely.schemas.job import (
    JobCreate,
    JobResponse,
    JobCreatedResponse,
    JobListItem,
    JobListResponse,
    JobDetailResponse,
    MyJobItem,
    InterestResponse,
    AssignRequest,
    AssignmentResponse,
    AssignResponse,
    UnassignResponse,
    JobStatusResponse,
    JobDeletedResponse,
)
from hirely.schemas.message import (
    MessageCreate,
    MessageResponse,
    MessageSentResponse,
    ConversationSummary,
    ChatMessage,
)

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "AuthResponse",
    "UserPublic",
    "UserProfile",
    "UserUpdate",
    "RatingRequest",
    "RatingResponse",
    "ReportRequest",
    "InterestedUser",
    "JobCreate",
    "JobResponse",
    "JobCreatedResponse",
    "JobListItem",
    "JobListResponse",
    "JobDetailResponse",
    "MyJobItem",
    "InterestResponse",
    "AssignRequest",
    "AssignmentResponse",
    "AssignResponse",
    "UnassignResponse",
    "JobStatusResponse",
    "JobDeletedResponse",
    "MessageCreate",
    "MessageResponse",
    "MessageSentResponse",
    "ConversationSummary",
    "ChatMessage",
]
