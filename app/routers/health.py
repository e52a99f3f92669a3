# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# User routes are not gated on readiness; these endpoints only report it.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app import __version__
from app.config import settings
from app.exceptions import DatastoreNotReadyError
from lib.mongo_client import MongoDBClient

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    database: str
    timestamp: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns whether the service process is alive.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.ENVIRONMENT,
        version=__version__,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check endpoint.

    Returns 200 once the MongoDB connection is confirmed, 503 before that
    or after a failed connect.
    """
    if not MongoDBClient.is_connected():
        status = MongoDBClient.status()
        raise DatastoreNotReadyError(status["state"], status["error"])

    return ReadinessResponse(
        status="ready",
        database="connected",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
