# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - user.py: User input and response schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

from .user import UserFields, UserResponse, user_from_document

__all__ = [
    "UserFields",
    "UserResponse",
    "user_from_document",
]
