# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# These models define the shape of a user document:
# - UserFields: Input for creating or updating a user (every field optional)
# - UserResponse: Output when returning a stored user to clients
#
# The schema is permissive on purpose: any subset of fields may be present,
# and there is no uniqueness or format rule on email. Unknown keys are
# dropped before the document reaches the database.
# =============================================================================

from typing import Any

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserFields(BaseModel):
    """
    Writable user fields.

    Numbers and booleans are coerced to strings; objects and arrays are rejected.
    Use `model_dump(exclude_unset=True)` so only supplied keys are written.

    Example:
        {
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "password": "secret"
        }
    """

    model_config = ConfigDict(
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    name: str | None = Field(default=None, description="Display name")
    email: str | None = Field(default=None, description="Email address (not unique)")
    # Stored as supplied
    password: str | None = Field(default=None, description="Password")

    @field_validator("name", "email", "password", mode="before")
    @classmethod
    def booleans_to_str(cls, value: Any) -> Any:
        """Cast true/false to "true"/"false" like the storage layer does."""
        if isinstance(value, bool):
            return "true" if value else "false"
        return value


class UserResponse(UserFields):
    """
    A stored user as returned to clients.

    The datastore identifier is serialized as `_id`.

    Example:
        {
            "_id": "665f1c2e8a4b2d0012345678",
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "password": "secret"
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Datastore-assigned identifier")


def user_from_document(document: dict[str, Any]) -> dict[str, Any]:
    """
    Convert a MongoDB document into a JSON-safe response dict.

    Fields absent from the document are left out of the response.
    """
    data = dict(document)
    if isinstance(data.get("_id"), ObjectId):
        data["_id"] = str(data["_id"])

    user = UserResponse.model_validate(data)
    return user.model_dump(by_alias=True, exclude_unset=True)
