# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - In-memory stand-in for the MongoDB user collection
# - API client with a fresh rate limiter per test
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from copy import deepcopy
from types import SimpleNamespace
from typing import Any

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import ReturnDocument

from lib.mongo_client import ConnectionState, MongoDBClient


# =============================================================================
# In-memory Collection
# =============================================================================

class FakeCursor:
    """Mimics the async cursor returned by AsyncCollection.find()."""

    def __init__(self, documents: list[dict[str, Any]]):
        self._documents = documents

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        return self._documents if length is None else self._documents[:length]


class FakeCollection:
    """
    Async user collection backed by a dict.

    Supports only the calls UserService makes, with _id filters.
    """

    def __init__(self):
        self.documents: dict[ObjectId, dict[str, Any]] = {}
        self.calls: list[str] = []

    def find(self, filter: dict | None = None) -> FakeCursor:
        self.calls.append("find")
        return FakeCursor([deepcopy(doc) for doc in self.documents.values()])

    async def find_one(self, filter: dict) -> dict[str, Any] | None:
        self.calls.append("find_one")
        document = self.documents.get(filter["_id"])
        return deepcopy(document) if document else None

    async def insert_one(self, document: dict[str, Any]) -> SimpleNamespace:
        self.calls.append("insert_one")
        document.setdefault("_id", ObjectId())
        self.documents[document["_id"]] = deepcopy(document)
        return SimpleNamespace(inserted_id=document["_id"])

    async def find_one_and_update(
        self,
        filter: dict,
        update: dict,
        return_document: bool = ReturnDocument.BEFORE,
    ) -> dict[str, Any] | None:
        self.calls.append("find_one_and_update")
        document = self.documents.get(filter["_id"])
        if document is None:
            return None

        before = deepcopy(document)
        document.update(update["$set"])
        return deepcopy(document) if return_document == ReturnDocument.AFTER else before

    async def find_one_and_delete(self, filter: dict) -> dict[str, Any] | None:
        self.calls.append("find_one_and_delete")
        return self.documents.pop(filter["_id"], None)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_mongo_client():
    """Keep MongoDBClient class state from leaking between tests."""
    MongoDBClient._instance = None
    MongoDBClient._state = ConnectionState.DISCONNECTED
    MongoDBClient._last_error = None
    yield
    MongoDBClient._instance = None
    MongoDBClient._state = ConnectionState.DISCONNECTED
    MongoDBClient._last_error = None


@pytest.fixture
def fake_collection(monkeypatch):
    """Route MongoDBClient.get_collection() to an in-memory collection."""
    collection = FakeCollection()
    monkeypatch.setattr(MongoDBClient, "get_collection", lambda: collection)
    return collection


@pytest.fixture
def client():
    """
    API test client.

    Lifespan isn't run, so no real connection is attempted. Server
    exceptions come back as responses so the fallback handler is visible.
    """
    from app.main import app, rate_limiter

    rate_limiter.reset()
    yield TestClient(app, raise_server_exceptions=False)
    rate_limiter.reset()


@pytest.fixture
def sample_user():
    """Sample user payload for testing."""
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "password": "analytical-engine",
    }
