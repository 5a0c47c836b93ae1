from pydantic import BaseModel, Field
from typing import Optional
from hirely.schemas.user import UserPublic


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    phone: Optional[str] = None
    preferred_distance: int = Field(0, ge=0)
    role: str = "job_seeker"


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserPublic
