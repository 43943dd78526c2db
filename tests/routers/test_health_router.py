"""Tests for health and readiness endpoints"""
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient

from restaurant_reviews.main import app

client = TestClient(app)


def _healthy_session_factory():
    session = AsyncMock()
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


class TestHealth:

    def test_health(self):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "restaurant-review-service"

    def test_liveness(self):
        response = client.get("/health/live")
        assert response.json()["status"] == "alive"

    def test_timestamps_are_utc(self):
        for path in ("/health", "/health/live"):
            timestamp = datetime.fromisoformat(client.get(path).json()["timestamp"])
            assert timestamp.utcoffset() == timedelta(0)

    @patch('restaurant_reviews.api.health.get_session_factory')
    @patch('restaurant_reviews.api.health.get_database')
    def test_check_timestamps_are_utc(self, mock_get_database, mock_get_session_factory):
        mock_get_database.return_value = AsyncMock()
        mock_get_session_factory.return_value = _healthy_session_factory()

        body = client.get("/health/ready").json()

        assert datetime.fromisoformat(body["timestamp"]).utcoffset() == timedelta(0)
        for check in body["checks"]:
            assert datetime.fromisoformat(check["timestamp"]).utcoffset() == timedelta(0)

    @patch('restaurant_reviews.api.health.get_session_factory')
    @patch('restaurant_reviews.api.health.get_database')
    def test_ready_when_both_stores_answer(self, mock_get_database, mock_get_session_factory):
        database = AsyncMock()
        mock_get_database.return_value = database
        mock_get_session_factory.return_value = _healthy_session_factory()

        response = client.get("/health/ready")

        assert response.status_code == 200
        names = {check["name"]: check["status"] for check in response.json()["checks"]}
        assert names["mongodb"] == "healthy"
        assert names["postgres"] == "healthy"
        database.command.assert_awaited_once_with("ping")

    @patch('restaurant_reviews.api.health.get_session_factory')
    @patch('restaurant_reviews.api.health.get_database')
    def test_not_ready_when_a_store_is_down(self, mock_get_database, mock_get_session_factory):
        mock_get_database.side_effect = ConnectionError("mongo down")
        mock_get_session_factory.return_value = _healthy_session_factory()

        response = client.get("/health/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "not ready"
        assert any(error.startswith("mongodb") for error in body["errors"])
