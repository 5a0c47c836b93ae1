"""Pytest configuration and fixtures."""

import os
import secrets

# Settings are read once and cached; set test values before hirely is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", f"test-only-{secrets.token_urlsafe(32)}")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import hirely.models  # noqa: F401
from hirely.database import Base, get_db
from hirely.main import app
from hirely.models import Job, User


# ==============================================================================
# Engine-level fixtures (AsyncSession against a per-test SQLite file)
# ==============================================================================

@pytest_asyncio.fixture
async def db(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'lifecycle.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


async def make_user(db: AsyncSession, name: str, email: str) -> User:
    user = User(
        name=name,
        email=email,
        password_hash="not-a-real-hash",
        location="Springfield",
    )
    db.add(user)
    await db.commit()
    return user


async def make_job(db: AsyncSession, poster_id: int, **overrides) -> Job:
    start = datetime(2030, 1, 1, 9, 0)
    fields = dict(
        posted_by_user_id=poster_id,
        title="Garden cleanup",
        description="Rake leaves and clear the beds",
        pay=25.0,
        pay_type="hourly",
        category="Gardening",
        start_time=start,
        end_time=start + timedelta(hours=4),
        total_hours=4,
        location="Springfield",
        private_details="Gate code 1234",
    )
    fields.update(overrides)
    job = Job(**fields)
    db.add(job)
    await db.commit()
    return job


# Plain ids: a rolled-back operation expires every ORM instance in the session

@pytest_asyncio.fixture
async def poster_id(db):
    return (await make_user(db, "Pat Poster", "pat@example.com")).id


@pytest_asyncio.fixture
async def worker_id(db):
    return (await make_user(db, "Wren Worker", "wren@example.com")).id


@pytest_asyncio.fixture
async def job_id(db, poster_id):
    return (await make_job(db, poster_id)).id


# ==============================================================================
# HTTP fixtures (TestClient with get_db pointed at a per-test SQLite file)
# ==============================================================================

@pytest.fixture
def client(tmp_path):
    db_path = tmp_path / "api.db"

    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    # NullPool: TestClient may run each request on its own event loop
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


def register(client: TestClient, name: str, email: str, **extra) -> dict:
    """Register a user and return {"id", "token", "headers", "user"}."""
    payload = {
        "name": name,
        "email": email,
        "password": "correct horse battery staple",
        "location": "Springfield",
    }
    payload.update(extra)
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    body = response.json()
    return {
        "id": body["user"]["id"],
        "token": body["token"],
        "headers": {"Authorization": f"Bearer {body['token']}"},
        "user": body["user"],
    }


def job_payload(**overrides) -> dict:
    payload = {
        "title": "Move a sofa",
        "description": "Two-person lift up one flight of stairs",
        "pay": 40,
        "pay_type": "fixed",
        "category": "Moving",
        "start_time": "2030-05-01T10:00:00",
        "end_time": "2030-05-01T12:00:00",
        "total_hours": 2,
        "location": "Shelbyville",
        "private_details": "Apartment 4B, buzz twice",
        "private_image_urls": ["https://img.example.com/sofa.jpg"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def employer(client):
    return register(client, "Erin Employer", "erin@example.com")


@pytest.fixture
def seeker(client):
    return register(client, "Sam Seeker", "sam@example.com")


@pytest.fixture
def posted_job(client, employer):
    response = client.post("/api/jobs", json=job_payload(), headers=employer["headers"])
    assert response.status_code == 201, response.text
    return response.json()["job"]
