"""
Tests for health and readiness endpoints.
"""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, AsyncMock, patch

from src.api.main import create_app


@pytest.fixture
def client(services):
    """Create test client over in-memory services."""
    with TestClient(create_app(services=services, start_worker=False)) as client:
        yield client


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_200(self, client):
        """Health endpoint returns 200 OK."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "voice-crm"
        assert data["version"] == "1.0.0"

    def test_root_lists_endpoints(self, client):
        data = client.get("/").json()

        assert data["endpoints"]["contacts"] == "/contacts"


class TestReadinessEndpoint:
    """Tests for /ready endpoint."""

    def test_ready_with_memory_storage(self, client, monkeypatch):
        """Ready endpoint skips the MongoDB ping for in-memory storage."""
        from src.config import settings
        monkeypatch.setattr(settings, "storage_backend", "memory")

        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["storage"] == "memory"
        assert response.json()["enrichment_worker"] == "stopped"

    def test_ready_when_mongodb_answers(self, client, monkeypatch):
        """Ready endpoint returns 200 when MongoDB answers the ping."""
        from src.config import settings
        monkeypatch.setattr(settings, "storage_backend", "mongodb")

        mock_client = MagicMock()
        mock_client.admin.command = AsyncMock(return_value={"ok": 1})

        with patch("src.api.routes.health.db_manager") as mock_db_manager:
            mock_db_manager.client = mock_client
            response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["storage"] == "connected"

    def test_not_ready_when_ping_fails(self, client, monkeypatch):
        """Ready endpoint returns 503 when MongoDB is unreachable."""
        from src.config import settings
        monkeypatch.setattr(settings, "storage_backend", "mongodb")

        mock_client = MagicMock()
        mock_client.admin.command = AsyncMock(side_effect=Exception("Connection refused"))

        with patch("src.api.routes.health.db_manager") as mock_db_manager:
            mock_db_manager.client = mock_client
            response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"
        assert "Connection refused" in response.json()["reason"]

    def test_not_ready_without_services(self):
        """Ready endpoint returns 503 before startup has wired services."""
        app = create_app(start_worker=False)

        response = TestClient(app).get("/ready")

        assert response.status_code == 503
        assert response.json()["reason"] == "Services not initialized"
