# =============================================================================
# core/services/user_service.py - User Business Logic
# =============================================================================
# Handles user CRUD operations against the MongoDB collection.
# Each operation makes exactly one datastore call.
# Separates HTTP concerns from database logic.
# =============================================================================

import logging
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo import ReturnDocument

from app.exceptions import InvalidUserIdError, UserValidationError
from core.models.user import UserFields, user_from_document
from lib.mongo_client import MongoDBClient

logger = logging.getLogger(__name__)


def _parse_object_id(user_id: str) -> ObjectId:
    """Convert a path ID to an ObjectId, raising InvalidUserIdError if malformed."""
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        raise InvalidUserIdError(user_id)


def _validate_fields(payload: dict[str, Any] | None) -> dict[str, Any]:
    """Validate a payload against the user schema and keep only the supplied fields."""
    try:
        fields = UserFields.model_validate(payload or {})
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise UserValidationError(errors)

    return fields.model_dump(exclude_unset=True)


class UserService:
    """
    Service for user management operations.

    Provides a clean interface between API routes and the database.
    """

    @staticmethod
    async def list_users() -> list[dict[str, Any]]:
        """
        Fetch every user in the collection.

        Returns:
            List of user dicts, unfiltered and unpaginated

        Raises:
            MongoClientError: If the datastore is unavailable
            PyMongoError: If the query fails
        """
        collection = MongoDBClient.get_collection()
        documents = await collection.find().to_list()
        return [user_from_document(doc) for doc in documents]

    @staticmethod
    async def create_user(payload: dict[str, Any] | None) -> dict[str, Any]:
        """
        Create a new user from any subset of the known fields.

        Args:
            payload: Parsed JSON body

        Returns:
            Created user dict including the assigned `_id`

        Raises:
            UserValidationError: If a field has the wrong type
            MongoClientError: If the datastore is unavailable
            PyMongoError: If the insert fails
        """
        document = _validate_fields(payload)
        collection = MongoDBClient.get_collection()

        result = await collection.insert_one(document)
        document["_id"] = result.inserted_id

        logger.info(f"Created user: {result.inserted_id}")
        return user_from_document(document)

    @staticmethod
    async def update_user(
        user_id: str,
        payload: dict[str, Any] | None,
    ) -> dict[str, Any] | None:
        """
        Update the supplied fields of a user.

        Args:
            user_id: The user ObjectId as a string
            payload: Parsed JSON body with the fields to change

        Returns:
            The user as it is after the update, or None if the ID doesn't exist

        Raises:
            InvalidUserIdError: If user_id isn't a valid ObjectId
            UserValidationError: If a field has the wrong type
            MongoClientError: If the datastore is unavailable
            PyMongoError: If the update fails
        """
        object_id = _parse_object_id(user_id)
        update_data = _validate_fields(payload)
        collection = MongoDBClient.get_collection()

        if update_data:
            document = await collection.find_one_and_update(
                {"_id": object_id},
                {"$set": update_data},
                return_document=ReturnDocument.AFTER,
            )
        else:
            # Nothing to write; MongoDB rejects an empty $set
            document = await collection.find_one({"_id": object_id})

        if document is None:
            return None

        logger.info(f"Updated user: {user_id}")
        return user_from_document(document)

    @staticmethod
    async def delete_user(user_id: str) -> dict[str, Any] | None:
        """
        Delete a user.

        Args:
            user_id: The user ObjectId as a string

        Returns:
            The deleted user, or None if the ID doesn't exist

        Raises:
            InvalidUserIdError: If user_id isn't a valid ObjectId
            MongoClientError: If the datastore is unavailable
            PyMongoError: If the delete fails
        """
        object_id = _parse_object_id(user_id)
        collection = MongoDBClient.get_collection()

        document = await collection.find_one_and_delete({"_id": object_id})
        if document is None:
            return None

        logger.info(f"Deleted user: {user_id}")
        return user_from_document(document)
