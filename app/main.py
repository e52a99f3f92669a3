# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Users API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --port 3000
#   python -m app.main
# =============================================================================

import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import __version__
from app.config import settings
from app.exceptions import (
    UsersApiException,
    unhandled_exception_handler,
    users_api_exception_handler,
)
from app.middleware import (
    FixedWindowRateLimiter,
    OriginCheckMiddleware,
    OriginPolicy,
    RateLimitMiddleware,
)
from app.routers import health, users
from lib.mongo_client import MongoDBClient

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Background connect task, started in lifespan
_connect_task: asyncio.Task | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: start the MongoDB connection in the background. The listener
      doesn't wait for it and a failure doesn't stop the server.
    - Shutdown: cancel a pending connect and close the client.
    """
    global _connect_task

    logger.info(f"Starting Users API in {settings.ENVIRONMENT} mode")
    if origin_policy.allow_all:
        logger.info("CORS: all origins allowed")
    else:
        logger.info(f"CORS origins: {settings.cors_origins_list}")

    _connect_task = asyncio.create_task(MongoDBClient.connect())

    yield

    logger.info("Shutting down Users API")

    if _connect_task and not _connect_task.done():
        _connect_task.cancel()
        try:
            await _connect_task
        except asyncio.CancelledError:
            pass

    await MongoDBClient.close()


# Create FastAPI application
app = FastAPI(
    title="Users API",
    description="CRUD over user records stored in MongoDB.",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Users",
            "description": "Create, list, update and delete users",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================
# Starlette runs the last-added middleware first, so they are added in
# reverse of the request order: origin check -> CORS headers -> rate limit.

origin_policy = OriginPolicy(
    allow_all=settings.CORS_ALLOW_ALL_ORIGINS,
    origins=settings.cors_origins_list,
)

rate_limiter = FixedWindowRateLimiter(
    max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
    window_seconds=settings.rate_limit_window_seconds,
)

app.add_middleware(
    RateLimitMiddleware,
    limiter=rate_limiter,
    message=settings.RATE_LIMIT_MESSAGE,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origin_policy.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(OriginCheckMiddleware, policy=origin_policy)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(UsersApiException, users_api_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


# =============================================================================
# Routers
# =============================================================================

app.include_router(
    users.router,
    prefix="/api/users",
    tags=["Users"]
)

app.include_router(
    health.router,
    prefix="/api",
    tags=["Health"]
)


if __name__ == "__main__":
    logger.info(f"Server is running on http://localhost:{settings.API_PORT}")
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
