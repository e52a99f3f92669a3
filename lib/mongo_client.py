# =============================================================================
# lib/mongo_client.py - MongoDB Client Wrapper
# =============================================================================
# This module owns the single long-lived connection pool to MongoDB.
# It implements the singleton pattern: one AsyncMongoClient is shared across
# the application and every request borrows connections from its pool.
#
# The connection is established in the background at startup. A failed
# connect is logged, not raised; requests then fail at their datastore call.
#
# Usage:
#   from lib.mongo_client import MongoDBClient
#   collection = MongoDBClient.get_collection()
#   users = await collection.find().to_list()
# =============================================================================

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Lifecycle of the shared client."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class MongoClientError(Exception):
    """
    Error during MongoDB client operations.

    `message` is safe to return to clients; `suggestion` is for the logs.
    """

    def __init__(
        self,
        message: str,
        code: str = "MONGODB_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class MongoDBClient:
    """
    Singleton wrapper for the MongoDB connection.

    All methods are class methods for easy access without instantiation.

    Example:
        await MongoDBClient.connect()
        if MongoDBClient.is_connected():
            collection = MongoDBClient.get_collection()
    """

    _instance: AsyncMongoClient | None = None
    _state: ConnectionState = ConnectionState.DISCONNECTED
    _last_error: str | None = None

    @classmethod
    async def connect(cls) -> bool:
        """
        Create the client and confirm the server answers a ping.

        Never raises. The outcome is logged and kept in the connection state.

        Returns:
            True if the server answered, False otherwise
        """
        cls._state = ConnectionState.CONNECTING
        cls._last_error = None

        try:
            if not settings.MONGODB_URI:
                raise MongoClientError(
                    message="MONGODB_URI is not set",
                    code="MISSING_URI",
                    suggestion="Set MONGODB_URI in the environment or .env file",
                )

            if cls._instance is None:
                cls._instance = AsyncMongoClient(settings.MONGODB_URI)

            await cls._instance.admin.command("ping")

        except Exception as e:
            cls._state = ConnectionState.FAILED
            cls._last_error = str(e)
            logger.error(f"Failed to connect to MongoDB: {e}")
            return False

        cls._state = ConnectionState.CONNECTED
        logger.info("Connected to MongoDB")
        return True

    @classmethod
    def get_collection(cls) -> AsyncCollection:
        """
        Get the user collection from the shared client.

        The client is usable as soon as it exists; the driver reconnects
        on its own if the server comes up after a failed ping.

        Raises:
            MongoClientError: If no client was ever created
        """
        if cls._instance is None:
            raise MongoClientError(
                message="Database connection is not available",
                code="DATASTORE_UNAVAILABLE",
                suggestion="Check MONGODB_URI and the startup logs for the connection error",
                details={"state": cls._state.value, "error": cls._last_error},
            )

        database = cls._instance.get_default_database(default=settings.MONGODB_DATABASE)
        return database[settings.MONGODB_COLLECTION]

    @classmethod
    def is_connected(cls) -> bool:
        """Check whether the last connection attempt succeeded."""
        return cls._state == ConnectionState.CONNECTED

    @classmethod
    def status(cls) -> dict[str, Any]:
        """Connection state and last error for readiness reporting."""
        return {
            "state": cls._state.value,
            "error": cls._last_error,
        }

    @classmethod
    async def close(cls) -> None:
        """Close the client and reset state."""
        if cls._instance is not None:
            await cls._instance.close()
            logger.info("MongoDB connection closed")
        cls._instance = None
        cls._state = ConnectionState.DISCONNECTED
        cls._last_error = None
