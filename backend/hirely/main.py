"""
Hirely API - Main Application Entry Point

This module initializes the FastAPI application with:
- Logging configuration
- Database schema initialization
- CORS middleware for the frontend SPA
- Prometheus metrics
- Domain error handlers
- API router registration

Architecture:
    FastAPI App
    ├── Lifespan Management (startup)
    ├── CORS Middleware (settings.cors_origins)
    ├── Prometheus Middleware + /metrics
    └── API Router (/api)
        ├── /auth - Registration and login
        ├── /jobs - Postings, interest, assignment, filled, soft delete
        ├── /users - Profiles, ratings, reports, my jobs
        └── /messages - Direct messages between users
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from hirely.config import get_settings
from hirely.database import init_db
from hirely.api import api_router
from hirely.errors import register_exception_handlers
from hirely.middleware.metrics import setup_metrics

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle events.

    Startup:
        1. Initialize database tables

    Yields:
        Control to the application during its runtime
    """
    await init_db()
    logger.info("Hirely API started")
    yield


app = FastAPI(
    title="Hirely API",
    description="Job marketplace API: postings, interest, assignments, ratings and messaging",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

setup_metrics(app)
register_exception_handlers(app)

app.include_router(api_router, prefix="/api")


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Hirely Backend API is running!"


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
