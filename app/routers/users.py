# =============================================================================
# app/routers/users.py - User CRUD Endpoints
# =============================================================================
# Four handlers, one datastore call each. Each handler converts its own
# datastore failure into a {"message": ...} response; anything else escapes
# to the fallback handler in main.py.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from app.dependencies import JsonBody
from app.exceptions import NOT_FOUND_MESSAGE, UserServiceError
from core.services.user_service import UserService
from lib.mongo_client import MongoClientError

logger = logging.getLogger(__name__)

router = APIRouter()

# Failures that a handler maps to its own status code
DATASTORE_ERRORS = (PyMongoError, MongoClientError, UserServiceError)

UserId = Annotated[str, Path(description="User ObjectId")]


def _error_message(exc: Exception) -> str:
    """Client-facing text for a datastore failure."""
    return getattr(exc, "message", None) or str(exc)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


# =============================================================================
# Endpoints
# =============================================================================

@router.get("")
async def list_users():
    """
    List every user.

    No filtering or pagination: the whole collection is returned.
    """
    try:
        users = await UserService.list_users()
    except DATASTORE_ERRORS as e:
        logger.error(f"Failed to list users: {e}")
        return _error_response(500, _error_message(e))

    return JSONResponse(status_code=200, content=users)


@router.post("")
async def create_user(payload: JsonBody):
    """
    Create a user.

    Any subset of name, email and password may be supplied; unknown
    keys are ignored. Returns the stored user with its `_id`.
    """
    try:
        user = await UserService.create_user(payload)
    except DATASTORE_ERRORS as e:
        logger.error(f"Failed to create user: {e}")
        return _error_response(400, _error_message(e))

    return JSONResponse(status_code=201, content=user)


@router.put("/{user_id}")
async def update_user(user_id: UserId, payload: JsonBody):
    """
    Update the supplied fields of a user.

    Returns the user as it is after the update.
    """
    try:
        user = await UserService.update_user(user_id, payload)
    except DATASTORE_ERRORS as e:
        logger.error(f"Failed to update user {user_id}: {e}")
        return _error_response(400, _error_message(e))

    if user is None:
        return _error_response(404, NOT_FOUND_MESSAGE)

    return JSONResponse(status_code=200, content=user)


@router.delete("/{user_id}")
async def delete_user(user_id: UserId):
    """Delete a user."""
    try:
        user = await UserService.delete_user(user_id)
    except DATASTORE_ERRORS as e:
        logger.error(f"Failed to delete user {user_id}: {e}")
        return _error_response(500, _error_message(e))

    if user is None:
        return _error_response(404, NOT_FOUND_MESSAGE)

    return JSONResponse(status_code=200, content={"message": f"Resource with ID {user_id} deleted"})
