# =============================================================================
# tests/test_health.py - Health and Connection Tests
# =============================================================================
# Tests for:
# - Liveness and readiness endpoints
# - MongoDBClient background connect outcomes
# =============================================================================

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

import lib.mongo_client
from app.config import settings
from lib.mongo_client import ConnectionState, MongoClientError, MongoDBClient


# =============================================================================
# Endpoints
# =============================================================================

class TestHealthEndpoints:
    """GET /api/health and /api/health/ready"""

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["environment"] == "development"

    def test_ready_before_connect_is_503(self, client):
        response = client.get("/api/health/ready")

        assert response.status_code == 503
        assert response.json() == {"message": "Datastore not ready: disconnected"}

    def test_ready_after_failed_connect_is_503(self, client):
        MongoDBClient._state = ConnectionState.FAILED
        MongoDBClient._last_error = "connection refused"

        response = client.get("/api/health/ready")

        assert response.status_code == 503
        assert response.json() == {"message": "Datastore not ready: failed"}
        assert "connection refused" not in response.text

    def test_ready_when_connected(self, client):
        MongoDBClient._state = ConnectionState.CONNECTED

        response = client.get("/api/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"


# =============================================================================
# Startup
# =============================================================================

class TestStartup:
    """Lifespan behavior with the background MongoDB connect."""

    def test_failed_connect_does_not_stop_server(self, fake_collection, monkeypatch):
        """Without MONGODB_URI the connect fails, is recorded, and requests are still served."""
        from app.main import app, rate_limiter

        monkeypatch.setattr(settings, "MONGODB_URI", None)
        rate_limiter.reset()

        with TestClient(app) as client:
            users = client.get("/api/users")
            ready = client.get("/api/health/ready")
            state = MongoDBClient.status()["state"]

        rate_limiter.reset()

        assert users.status_code == 200
        assert users.json() == []
        assert state == "failed"
        assert ready.status_code == 503
        assert ready.json() == {"message": "Datastore not ready: failed"}


# =============================================================================
# MongoDBClient
# =============================================================================

@pytest.fixture
def mock_mongo(monkeypatch):
    """Replace AsyncMongoClient with a mock whose ping succeeds."""
    instance = MagicMock()
    instance.admin.command = AsyncMock(return_value={"ok": 1})
    factory = MagicMock(return_value=instance)
    monkeypatch.setattr(lib.mongo_client, "AsyncMongoClient", factory)
    monkeypatch.setattr(settings, "MONGODB_URI", "mongodb://localhost:27017/users_api")
    return instance


class TestMongoDBClient:
    """Tests for MongoDBClient connection handling."""

    def test_connect_without_uri_fails_quietly(self, monkeypatch):
        """A missing URI is logged, not raised."""
        monkeypatch.setattr(settings, "MONGODB_URI", None)

        assert asyncio.run(MongoDBClient.connect()) is False
        assert MongoDBClient.status() == {
            "state": "failed",
            "error": "[MISSING_URI] MONGODB_URI is not set Suggestion: Set MONGODB_URI in the environment or .env file",
        }

    def test_connect_success(self, mock_mongo):
        assert asyncio.run(MongoDBClient.connect()) is True
        assert MongoDBClient.is_connected()
        mock_mongo.admin.command.assert_awaited_once_with("ping")

    def test_connect_ping_failure(self, mock_mongo):
        """A failed ping leaves the client in place for later requests."""
        mock_mongo.admin.command.side_effect = ConnectionError("server selection timeout")

        assert asyncio.run(MongoDBClient.connect()) is False
        assert MongoDBClient.status()["state"] == "failed"
        assert MongoDBClient._instance is mock_mongo

    def test_get_collection_without_client(self):
        with pytest.raises(MongoClientError) as exc_info:
            MongoDBClient.get_collection()

        assert exc_info.value.code == "DATASTORE_UNAVAILABLE"

    def test_get_collection_uses_settings(self, mock_mongo):
        asyncio.run(MongoDBClient.connect())

        MongoDBClient.get_collection()

        mock_mongo.get_default_database.assert_called_once_with(default=settings.MONGODB_DATABASE)
        mock_mongo.get_default_database.return_value.__getitem__.assert_called_once_with("users")

    def test_close_resets_state(self, mock_mongo):
        mock_mongo.close = AsyncMock()
        asyncio.run(MongoDBClient.connect())

        asyncio.run(MongoDBClient.close())

        mock_mongo.close.assert_awaited_once()
        assert MongoDBClient.status() == {"state": "disconnected", "error": None}
