# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - mongo_client.py: Shared MongoDB client and connection state
# =============================================================================

from lib.mongo_client import ConnectionState, MongoClientError, MongoDBClient

__all__ = [
    "ConnectionState",
    "MongoClientError",
    "MongoDBClient",
]
