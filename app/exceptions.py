# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error body has the same shape: {"message": "..."}.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong!"
NOT_FOUND_MESSAGE = "Resource not found"


class UsersApiException(Exception):
    """
    Base exception for the Users API.

    All custom exceptions inherit from this class. `suggestion` and
    `details` are logged server-side only; clients receive `message`.
    """

    def __init__(
        self,
        message: str,
        code: str = "USERS_API_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        return {"message": self.message}


# =============================================================================
# Resource Exceptions
# =============================================================================

class ResourceNotFoundError(UsersApiException):
    """Raised when a user ID doesn't exist."""

    def __init__(self, resource_id: str):
        super().__init__(
            message=NOT_FOUND_MESSAGE,
            code="RESOURCE_NOT_FOUND",
            status_code=404,
            suggestion="Check that the ID is correct and the user hasn't been deleted",
            details={"id": resource_id},
        )


class UserServiceError(UsersApiException):
    """Base class for failures raised by the user service before or at the datastore."""

    def __init__(self, message: str, code: str = "USER_SERVICE_ERROR", **kwargs: Any):
        super().__init__(message=message, code=code, status_code=400, **kwargs)


class InvalidUserIdError(UserServiceError):
    """Raised when a path ID is not a valid ObjectId."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f'Cast to ObjectId failed for value "{user_id}" at path "_id"',
            code="INVALID_ID",
            suggestion="IDs are 24-character hex strings returned when a user is created",
            details={"id": user_id},
        )


class UserValidationError(UserServiceError):
    """Raised when a payload doesn't match the user schema."""

    def __init__(self, errors: list[str]):
        super().__init__(
            message=f"User validation failed: {'; '.join(errors)}",
            code="VALIDATION_ERROR",
            suggestion="name, email and password must be strings",
            details={"errors": errors},
        )


class MalformedBodyError(UsersApiException):
    """Raised when a JSON request body can't be parsed into an object."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="MALFORMED_BODY",
            status_code=400,
            suggestion="Send a JSON object with Content-Type: application/json",
        )


# =============================================================================
# Gate and Readiness Exceptions
# =============================================================================

class OriginNotAllowedError(UsersApiException):
    """Raised when a request's Origin header is outside the allow-list."""

    def __init__(self, origin: str):
        super().__init__(
            message="Not allowed by CORS",
            code="ORIGIN_NOT_ALLOWED",
            status_code=403,
            suggestion="Add the origin to CORS_ORIGINS or enable CORS_ALLOW_ALL_ORIGINS",
            details={"origin": origin},
        )


class DatastoreNotReadyError(UsersApiException):
    """Raised by the readiness check while MongoDB isn't connected."""

    def __init__(self, state: str, error: str | None = None):
        super().__init__(
            message=f"Datastore not ready: {state}",
            code="DATASTORE_NOT_READY",
            status_code=503,
            suggestion="Check MONGODB_URI and that the database is reachable",
            details={"state": state, "error": error},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def users_api_exception_handler(
    request: Request,
    exc: UsersApiException
) -> JSONResponse:
    """Convert a UsersApiException that escaped its route into a JSON response."""
    logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Last-resort handler.

    Logs the full traceback and returns a generic body. Never exposes
    exception details to the client.
    """
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc!r}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"message": GENERIC_ERROR_MESSAGE}
    )
