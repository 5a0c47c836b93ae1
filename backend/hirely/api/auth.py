import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool
from hirely.database import get_db
from hirely.models import User
from hirely.schemas import RegisterRequest, LoginRequest, AuthResponse, UserPublic
from hirely.auth import Identity, hash_password, verify_password, create_access_token
from hirely.errors import Conflict, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_token(user: User) -> str:
    return create_access_token(Identity(id=user.id, email=user.email, role=user.role))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: AsyncSession = Depends(get_db)):
    existing = await db.execute(select(User.id).where(User.email == request.email))
    if existing.first() is not None:
        raise Conflict("User with this email already exists")

    password_hash = await run_in_threadpool(hash_password, request.password)
    user = User(
        name=request.name,
        email=request.email,
        password_hash=password_hash,
        phone=request.phone,
        location=request.location,
        preferred_distance=request.preferred_distance,
        role=request.role or "job_seeker",
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("This email is already in use by another account.")
    await db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return AuthResponse(
        message="User registered successfully",
        token=_issue_token(user),
        user=UserPublic.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == request.email))
    user = result.scalar_one_or_none()

    if user is None or not await run_in_threadpool(verify_password, request.password, user.password_hash):
        raise ValidationError("Invalid Credentials")

    return AuthResponse(
        message="Logged in successfully",
        token=_issue_token(user),
        user=UserPublic.model_validate(user),
    )
